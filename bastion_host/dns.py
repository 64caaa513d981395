import pulumi
import pulumi_aws as aws

from bastion_host.config import BastionArgs
from bastion_host.load_balancer import LoadBalancing


def create_dns_record(name: str, args: BastionArgs, lb: LoadBalancing,
                      opts: pulumi.ResourceOptions) -> aws.route53.Record:
    """Alias A record for the load balancer. Callers check ``dns_record_enabled`` first."""
    return aws.route53.Record(f"{name}-record",
        name=args.bastion_record_name,
        zone_id=args.hosted_zone_id,
        type="A",
        aliases=[aws.route53.RecordAliasArgs(
            name=lb.dns_name,
            zone_id=lb.zone_id,
            evaluate_target_health=True,
        )],
        opts=opts,
    )
