import pulumi

from bastion_host import BastionArgs, BastionHost

# ----- CONFIG -----
config = pulumi.Config()
args = BastionArgs.from_config(config)

# ----- Bastion -----
bastion = BastionHost("bastion", args)

# ----- Outputs -----
for output_name, value in bastion.outputs.items():
    pulumi.export(output_name, value)
