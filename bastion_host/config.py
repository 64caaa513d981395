"""
Stack configuration for the bastion fleet.

Every value comes from the Pulumi stack config (``Pulumi.<stack>.yaml``), e.g.

    pulumi config set bucket_name acme-bastion-logs
    pulumi config set --path 'elb_subnets[0]' subnet-0abc
    pulumi config set bastion_instance_count 2

Only the bucket, the VPC and the two subnet lists are required.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pulumi

from bastion_host.errors import BastionConfigError


@dataclass
class InjectedLoadBalancer:
    """A network load balancer created outside this stack."""
    arn: str
    dns_name: str
    zone_id: str

    @classmethod
    def from_object(cls, value) -> "InjectedLoadBalancer":
        if not isinstance(value, dict):
            raise BastionConfigError(
                f"bastion_nlb must be an object with arn, dns_name and zone_id, got {type(value).__name__}")
        missing = [k for k in ("arn", "dns_name", "zone_id") if not value.get(k)]
        if missing:
            raise BastionConfigError(f"bastion_nlb is missing {', '.join(missing)}")
        return cls(arn=value["arn"], dns_name=value["dns_name"], zone_id=value["zone_id"])


@dataclass
class BastionArgs:
    region: str
    bucket_name: str
    vpc_id: str
    elb_subnets: List[str]
    auto_scaling_group_subnets: List[str]
    tags: Dict[str, str] = field(default_factory=dict)
    cidrs: List[str] = field(default_factory=lambda: ["0.0.0.0/0"])
    public_ssh_port: int = 22
    private_ssh_port: int = 22
    bastion_instance_count: int = 1
    bastion_host_key_pair: Optional[str] = None
    bastion_ami: Optional[str] = None
    associate_public_ip_address: bool = True
    bastion_additional_security_groups: List[str] = field(default_factory=list)
    create_lb: bool = True
    is_lb_private: bool = False
    bastion_nlb: Optional[InjectedLoadBalancer] = None
    create_dns_record: bool = False
    hosted_zone_id: Optional[str] = None
    bastion_record_name: str = ""
    bucket_versioning: bool = True
    bucket_force_destroy: bool = False
    log_auto_clean: bool = False
    log_standard_ia_days: int = 30
    log_glacier_days: int = 60
    log_expiry_days: int = 90
    kms_enable_key_rotation: bool = True
    allow_ssh_commands: bool = False
    extra_user_data_content: str = ""
    name_prefix: str = "bastion"
    bastion_iam_policy_name: str = "BastionHost"
    bastion_iam_role_name: Optional[str] = None
    bastion_iam_permissions_boundary: Optional[str] = None
    use_imds_v2: bool = True

    def __post_init__(self):
        if self.bastion_instance_count < 0:
            raise BastionConfigError(
                f"bastion_instance_count must be >= 0, got {self.bastion_instance_count}")
        for key in ("public_ssh_port", "private_ssh_port"):
            port = getattr(self, key)
            if not 1 <= port <= 65535:
                raise BastionConfigError(f"{key} must be between 1 and 65535, got {port}")

        # A record that would be created needs somewhere to live
        will_have_lb = self.create_lb or self.bastion_nlb is not None
        if self.create_dns_record and will_have_lb and not self.hosted_zone_id:
            raise BastionConfigError("create_dns_record requires hosted_zone_id")

    @property
    def lifecycle_days_ordered(self) -> bool:
        return self.log_standard_ia_days < self.log_glacier_days < self.log_expiry_days

    @classmethod
    def from_config(cls, config: pulumi.Config, aws_config: Optional[pulumi.Config] = None) -> "BastionArgs":
        region = config.get("region")
        if region is None:
            region = (aws_config or pulumi.Config("aws")).require("region")

        nlb = config.get_object("bastion_nlb")
        defaults = cls.__dataclass_fields__

        def get_bool(key):
            value = config.get_bool(key)
            return defaults[key].default if value is None else value

        def get_int(key):
            value = config.get_int(key)
            return defaults[key].default if value is None else value

        return cls(
            region=region,
            bucket_name=config.require("bucket_name"),
            vpc_id=config.require("vpc_id"),
            elb_subnets=list(config.require_object("elb_subnets")),
            auto_scaling_group_subnets=list(config.require_object("auto_scaling_group_subnets")),
            tags=dict(config.get_object("tags") or {}),
            cidrs=list(config.get_object("cidrs") or ["0.0.0.0/0"]),
            public_ssh_port=get_int("public_ssh_port"),
            private_ssh_port=get_int("private_ssh_port"),
            bastion_instance_count=get_int("bastion_instance_count"),
            bastion_host_key_pair=config.get("bastion_host_key_pair"),
            bastion_ami=config.get("bastion_ami"),
            associate_public_ip_address=get_bool("associate_public_ip_address"),
            bastion_additional_security_groups=list(
                config.get_object("bastion_additional_security_groups") or []),
            create_lb=get_bool("create_lb"),
            is_lb_private=get_bool("is_lb_private"),
            bastion_nlb=InjectedLoadBalancer.from_object(nlb) if nlb is not None else None,
            create_dns_record=get_bool("create_dns_record"),
            hosted_zone_id=config.get("hosted_zone_id"),
            bastion_record_name=config.get("bastion_record_name") or "",
            bucket_versioning=get_bool("bucket_versioning"),
            bucket_force_destroy=get_bool("bucket_force_destroy"),
            log_auto_clean=get_bool("log_auto_clean"),
            log_standard_ia_days=get_int("log_standard_ia_days"),
            log_glacier_days=get_int("log_glacier_days"),
            log_expiry_days=get_int("log_expiry_days"),
            kms_enable_key_rotation=get_bool("kms_enable_key_rotation"),
            allow_ssh_commands=get_bool("allow_ssh_commands"),
            extra_user_data_content=config.get("extra_user_data_content") or "",
            name_prefix=config.get("name_prefix") or "bastion",
            bastion_iam_policy_name=config.get("bastion_iam_policy_name") or "BastionHost",
            bastion_iam_role_name=config.get("bastion_iam_role_name"),
            bastion_iam_permissions_boundary=config.get("bastion_iam_permissions_boundary"),
            use_imds_v2=get_bool("use_imds_v2"),
        )

