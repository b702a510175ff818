"""
L0 Data — components, build recipes, and constants.

Pure data. No logic beyond template formatting.
"""
