"""
TextForge: Multi-provider Text Transformation Package
=======================================================
Hexagonal (Ports & Adapters) architecture.

Layer map
─────────────────────────────────────────────────────
  config/       Environment settings & the fixed tool catalog (prompts)
  domain/       Pure business objects (models, exceptions), no I/O
  ports/        Abstract interfaces (Python Protocols)
  adapters/     Concrete implementations of each Port (Gemini, OpenAI-compatible,
                relay worker, configuration sources)
  services/     Dispatcher, prober, normalizer; depend only on Ports
  interfaces/   Delivery layer: CLI
  tests/        Full test suite: unit / integration / e2e

Adding a backend:
  1. Write a new adapter in adapters/ implementing GenerationPort
  2. Register it against an AdapterKind in services/container.py
  3. Done: the dispatcher routes on the tag, not on inline branches
"""
__version__ = "1.0.0"
