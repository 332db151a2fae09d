"""
HTTP binding layer for iorgate.
"""
