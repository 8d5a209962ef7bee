"""VirtualMachineRestore admission — validating webhook core."""

__version__ = "0.1.0"
