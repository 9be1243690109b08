"""
Explorer - source verification against block explorers and Sourcify.
"""
