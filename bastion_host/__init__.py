from bastion_host.config import BastionArgs, InjectedLoadBalancer
from bastion_host.errors import BastionConfigError
from bastion_host.host import BastionHost

__all__ = ["BastionArgs", "BastionConfigError", "BastionHost", "InjectedLoadBalancer"]
