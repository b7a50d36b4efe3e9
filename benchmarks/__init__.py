"""Performance benchmarks for regimehmm.

Microbenchmarks for the hot paths of the engine: the forward-backward
recursion and full Baum-Welch fits.
"""
