"""
BastionHost component: an SSH jump fleet with its bucket, key, identity and network edges.

Creation order follows the resource references:
    KMS key -> bucket / alias -> IAM -> security groups -> launch template
    -> (load balancer, target group, listener) -> auto scaling group -> (DNS record)
"""

from typing import Optional

import pulumi

from bastion_host.compute import create_compute
from bastion_host.config import BastionArgs
from bastion_host.dns import create_dns_record
from bastion_host.iam import create_iam
from bastion_host.load_balancer import create_load_balancer, dns_record_enabled
from bastion_host.security import create_security_groups
from bastion_host.storage import create_storage


class BastionHost(pulumi.ComponentResource):
    def __init__(self, name: str, args: BastionArgs, opts: Optional[pulumi.ResourceOptions] = None):
        super().__init__("custom:bastion:BastionHost", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        self.storage = create_storage(name, args, child_opts)
        self.identity = create_iam(name, args, self.storage.bucket, self.storage.key, child_opts)
        self.security_groups = create_security_groups(name, args, child_opts)
        self.load_balancing = create_load_balancer(name, args, child_opts)

        target_group_arns = None
        if self.load_balancing.target_group is not None:
            target_group_arns = [self.load_balancing.target_group.arn]

        self.fleet = create_compute(
            name,
            args,
            bucket_name=self.storage.bucket.bucket,
            bastion_sg_id=self.security_groups.bastion.id,
            instance_profile_name=self.identity.instance_profile.name,
            target_group_arns=target_group_arns,
            opts=child_opts,
        )

        self.dns_record = None
        if dns_record_enabled(args.create_dns_record, self.load_balancing.mode):
            self.dns_record = create_dns_record(name, args, self.load_balancing, child_opts)
        elif args.create_dns_record:
            pulumi.log.warn("create_dns_record is set but there is no load balancer; no DNS record created", self)

        lb = self.load_balancing
        self.outputs = {
            "bucket_name": self.storage.bucket.bucket,
            "bucket_arn": self.storage.bucket.arn,
            "bucket_kms_key_arn": self.storage.key.arn,
            "bucket_kms_key_alias": self.storage.alias.name,
            "bastion_host_security_group": self.security_groups.bastion.id,
            "private_instances_security_group": self.security_groups.private_instances.id,
            "bastion_role_arn": self.identity.role.arn,
            "bastion_launch_template_name": self.fleet.launch_template.name,
            "bastion_auto_scaling_group_name": self.fleet.auto_scaling_group.name,
            "lb_arn": lb.arn,
            "lb_dns_name": lb.dns_name,
            "target_group_arn": lb.target_group.arn if lb.target_group is not None else None,
            "dns_record_fqdn": self.dns_record.fqdn if self.dns_record is not None else None,
        }
        self.register_outputs(self.outputs)
