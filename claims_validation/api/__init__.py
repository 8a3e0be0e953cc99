"""
HTTP surface for operators: health and validation re-trigger.
"""
