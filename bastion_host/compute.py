"""
Launch template and fixed-size auto scaling group for the bastion fleet.

The group never scales: min, max and desired all equal ``bastion_instance_count``.
It only replaces instances that fail EC2 health checks.
"""

from dataclasses import dataclass
from typing import List, Optional

import pulumi
import pulumi_aws as aws

from bastion_host.config import BastionArgs
from bastion_host.user_data import encode_user_data, render_user_data

INSTANCE_TYPE = "t2.nano"
AMAZON_LINUX_2_NAME = "amzn2-ami-hvm-*-x86_64-gp2"
HEALTH_CHECK_GRACE_PERIOD = 180
HEALTH_CHECK_TYPE = "EC2"
TERMINATION_POLICIES = ["OldestLaunchConfiguration"]


@dataclass
class Fleet:
    launch_template: aws.ec2.LaunchTemplate
    auto_scaling_group: aws.autoscaling.Group


def resolve_ami(args: BastionArgs) -> str:
    if args.bastion_ami:
        return args.bastion_ami

    ami = aws.ec2.get_ami(
        most_recent=True,
        owners=["amazon"],
        filters=[
            aws.ec2.GetAmiFilterArgs(name="name", values=[AMAZON_LINUX_2_NAME]),
            aws.ec2.GetAmiFilterArgs(name="virtualization-type", values=["hvm"]),
        ],
    )
    pulumi.log.info(f"bastion AMI resolved to {ami.id}")
    return ami.id


def fleet_size(args):
    """(min, max, desired) for the group."""
    count = args.bastion_instance_count
    return count, count, count


def create_compute(name: str, args: BastionArgs, bucket_name: pulumi.Input[str],
                   bastion_sg_id: pulumi.Input[str], instance_profile_name: pulumi.Input[str],
                   target_group_arns: Optional[List[pulumi.Input[str]]],
                   opts: pulumi.ResourceOptions) -> Fleet:
    user_data = pulumi.Output.from_input(bucket_name).apply(
        lambda bucket: encode_user_data(render_user_data(
            aws_region=args.region,
            bucket_name=bucket,
            allow_ssh_commands=args.allow_ssh_commands,
            extra_user_data_content=args.extra_user_data_content,
        )))

    instance_tags = {**args.tags, "Name": f"{args.name_prefix}-host"}

    # ----- Launch Template -----
    launch_template = aws.ec2.LaunchTemplate(f"{name}-lt",
        name_prefix=f"{args.name_prefix}-",
        image_id=resolve_ami(args),
        instance_type=INSTANCE_TYPE,
        key_name=args.bastion_host_key_pair,
        update_default_version=True,
        monitoring=aws.ec2.LaunchTemplateMonitoringArgs(enabled=True),
        network_interfaces=[aws.ec2.LaunchTemplateNetworkInterfaceArgs(
            associate_public_ip_address=str(args.associate_public_ip_address).lower(),
            delete_on_termination="true",
            security_groups=[bastion_sg_id, *args.bastion_additional_security_groups],
        )],
        iam_instance_profile=aws.ec2.LaunchTemplateIamInstanceProfileArgs(
            name=instance_profile_name,
        ),
        metadata_options=aws.ec2.LaunchTemplateMetadataOptionsArgs(
            http_endpoint="enabled",
            http_tokens="required" if args.use_imds_v2 else "optional",
        ),
        tag_specifications=[
            aws.ec2.LaunchTemplateTagSpecificationArgs(resource_type="instance", tags=instance_tags),
            aws.ec2.LaunchTemplateTagSpecificationArgs(resource_type="volume", tags=instance_tags),
        ],
        user_data=user_data,
        tags=args.tags,
        opts=opts,
    )

    # ----- Auto Scaling Group -----
    min_size, max_size, desired = fleet_size(args)
    asg_tags = {**args.tags, "Name": f"ASG-{args.name_prefix}"}

    auto_scaling_group = aws.autoscaling.Group(f"{name}-asg",
        name_prefix=f"ASG-{args.name_prefix}-",
        launch_template=aws.autoscaling.GroupLaunchTemplateArgs(
            id=launch_template.id,
            version="$Latest",
        ),
        min_size=min_size,
        max_size=max_size,
        desired_capacity=desired,
        vpc_zone_identifiers=args.auto_scaling_group_subnets,
        default_cooldown=180,
        health_check_grace_period=HEALTH_CHECK_GRACE_PERIOD,
        health_check_type=HEALTH_CHECK_TYPE,
        target_group_arns=target_group_arns or None,
        termination_policies=TERMINATION_POLICIES,
        tags=[
            aws.autoscaling.GroupTagArgs(key=key, value=value, propagate_at_launch=True)
            for key, value in asg_tags.items()
        ],
        opts=opts,
    )

    return Fleet(launch_template=launch_template, auto_scaling_group=auto_scaling_group)
