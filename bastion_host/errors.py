class BastionConfigError(ValueError):
    """Raised when the stack configuration can never produce a working bastion."""
