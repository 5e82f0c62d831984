"""
compares CpG methylation between two sorted samples
"""
__version__ = '1.0.0'
