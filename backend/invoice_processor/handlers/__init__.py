"""
Reference step handlers for local, file-based invoice processing.

Each module implements one or more of the contracts in
invoice_processor.pipeline.handlers.  pipeline.builder wires them from
settings; applications with their own storage or target systems
implement the contracts directly instead.
"""
