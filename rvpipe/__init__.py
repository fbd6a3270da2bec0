"""Datapath components and a stall-only five-stage pipelined RV32 processor model."""

__version__ = "0.1.0"