"""Fixed-point parameters, CAN bit mapping, sine/SVPWM generation, PI control, task scheduling and a command terminal."""

__version__ = "0.1.0"