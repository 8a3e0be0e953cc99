"""
Validation services: provider schedule cache, fee details lookup,
submission event handling and the validation engine.
"""
