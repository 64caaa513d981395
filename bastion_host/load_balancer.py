"""
Optional network load balancer in front of the fleet.

Three outcomes, picked by ``resolve_mode``:
- injected: an NLB from another stack (``bastion_nlb``) gets our target group and listener.
- created:  ``create_lb`` is set and nothing was injected, so we build the NLB as well.
- none:     no load balancing resources; the fleet is reached on instance addresses.
"""

import enum
from dataclasses import dataclass
from typing import Optional

import pulumi
import pulumi_aws as aws

from bastion_host.config import BastionArgs, InjectedLoadBalancer


class LoadBalancerMode(enum.Enum):
    CREATED = "created"
    INJECTED = "injected"
    NONE = "none"


@dataclass
class LoadBalancing:
    mode: LoadBalancerMode
    load_balancer: Optional[aws.lb.LoadBalancer] = None
    target_group: Optional[aws.lb.TargetGroup] = None
    listener: Optional[aws.lb.Listener] = None
    arn: Optional[pulumi.Input[str]] = None
    dns_name: Optional[pulumi.Input[str]] = None
    zone_id: Optional[pulumi.Input[str]] = None


def resolve_mode(create_lb: bool, injected: Optional[InjectedLoadBalancer]) -> LoadBalancerMode:
    if injected is not None:
        return LoadBalancerMode.INJECTED
    if create_lb:
        return LoadBalancerMode.CREATED
    return LoadBalancerMode.NONE


def dns_record_enabled(create_dns_record, mode):
    return create_dns_record and mode is not LoadBalancerMode.NONE


def create_load_balancer(name: str, args: BastionArgs, opts: pulumi.ResourceOptions) -> LoadBalancing:
    mode = resolve_mode(args.create_lb, args.bastion_nlb)
    if mode is LoadBalancerMode.INJECTED and args.create_lb:
        pulumi.log.info(f"using injected load balancer {args.bastion_nlb.arn}; create_lb ignored")
    pulumi.log.info(f"bastion load balancer mode: {mode.value}")

    if mode is LoadBalancerMode.NONE:
        return LoadBalancing(mode=mode)

    lb = None
    if mode is LoadBalancerMode.CREATED:
        lb = aws.lb.LoadBalancer(f"{name}-lb",
            internal=args.is_lb_private,
            load_balancer_type="network",
            subnets=args.elb_subnets,
            tags={**args.tags, "Name": f"{args.name_prefix}-lb"},
            opts=opts,
        )
        arn, dns_name, zone_id = lb.arn, lb.dns_name, lb.zone_id
    else:
        arn, dns_name, zone_id = args.bastion_nlb.arn, args.bastion_nlb.dns_name, args.bastion_nlb.zone_id

    target_group = aws.lb.TargetGroup(f"{name}-lb-target",
        port=args.public_ssh_port,
        protocol="TCP",
        vpc_id=args.vpc_id,
        target_type="instance",
        health_check=aws.lb.TargetGroupHealthCheckArgs(
            port="traffic-port",
            protocol="TCP",
        ),
        tags={**args.tags, "Name": f"{args.name_prefix}-lb-target"},
        opts=opts,
    )

    listener = aws.lb.Listener(f"{name}-lb-listener",
        load_balancer_arn=arn,
        port=args.public_ssh_port,
        protocol="TCP",
        default_actions=[aws.lb.ListenerDefaultActionArgs(
            type="forward",
            target_group_arn=target_group.arn,
        )],
        tags=args.tags,
        opts=opts,
    )

    return LoadBalancing(
        mode=mode,
        load_balancer=lb,
        target_group=target_group,
        listener=listener,
        arn=arn,
        dns_name=dns_name,
        zone_id=zone_id,
    )
