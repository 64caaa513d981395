from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from bastion_host.config import BastionArgs


@dataclass
class SecurityGroups:
    bastion: aws.ec2.SecurityGroup
    private_instances: aws.ec2.SecurityGroup


def ingress_cidrs(subnet_cidrs, cidrs):
    """Union of the load balancer subnet ranges and the explicit allow-list, first seen first."""
    return list(dict.fromkeys([*subnet_cidrs, *cidrs]))


def bastion_ingress_cidrs(args: BastionArgs) -> pulumi.Output:
    # NLB health checks originate from the load balancer subnets
    subnet_cidrs = [aws.ec2.get_subnet_output(id=subnet_id).cidr_block for subnet_id in args.elb_subnets]
    return pulumi.Output.all(*subnet_cidrs).apply(lambda blocks: ingress_cidrs(blocks, args.cidrs))


def create_security_groups(name: str, args: BastionArgs, opts: pulumi.ResourceOptions) -> SecurityGroups:
    # Bastion SG: SSH from the allow-list, anything out
    bastion_sg = aws.ec2.SecurityGroup(f"{name}-host-sg",
        name_prefix=f"{args.name_prefix}-host-",
        vpc_id=args.vpc_id,
        description="Enable SSH access to the bastion host from external via SSH port",
        ingress=[aws.ec2.SecurityGroupIngressArgs(
            description="Incoming traffic to bastion",
            protocol="tcp",
            from_port=args.public_ssh_port,
            to_port=args.public_ssh_port,
            cidr_blocks=bastion_ingress_cidrs(args),
        )],
        egress=[aws.ec2.SecurityGroupEgressArgs(
            description="Outgoing traffic from bastion",
            protocol="-1",
            from_port=0,
            to_port=0,
            cidr_blocks=["0.0.0.0/0"],
        )],
        tags={**args.tags, "Name": f"{args.name_prefix}-host"},
        opts=opts,
    )

    # Private SG: SSH from bastion only
    private_sg = aws.ec2.SecurityGroup(f"{name}-priv-instances-sg",
        name_prefix=f"{args.name_prefix}-priv-instances-",
        vpc_id=args.vpc_id,
        description="Enable SSH access to the Private instances from the bastion via SSH port",
        ingress=[aws.ec2.SecurityGroupIngressArgs(
            description="Incoming traffic from bastion",
            protocol="tcp",
            from_port=args.private_ssh_port,
            to_port=args.private_ssh_port,
            security_groups=[bastion_sg.id],
        )],
        tags={**args.tags, "Name": f"{args.name_prefix}-priv-instances"},
        opts=opts,
    )

    return SecurityGroups(bastion=bastion_sg, private_instances=private_sg)
