"""Rostrum: AI adjudication and turn orchestration for debates."""

__version__ = "0.1.0"
