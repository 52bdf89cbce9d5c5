"""bucketperf - regional bucket download latency benchmarks."""

__version__ = "0.1.0"
