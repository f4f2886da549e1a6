"""Performance benchmarks for qregister.

Microbenchmarks for the hot paths: gate application on registers and
measurement sampling.
"""
