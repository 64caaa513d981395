import pulumi

from bastion_host.security import create_security_groups, ingress_cidrs


def test_ingress_cidrs_union_keeps_order():
    assert ingress_cidrs(["10.0.1.0/24", "10.0.2.0/24"], ["203.0.113.0/24", "10.0.1.0/24"]) == [
        "10.0.1.0/24",
        "10.0.2.0/24",
        "203.0.113.0/24",
    ]


def test_ingress_cidrs_without_subnets():
    assert ingress_cidrs([], ["0.0.0.0/0"]) == ["0.0.0.0/0"]


def test_security_groups(run, make_args):
    args = make_args(cidrs=["203.0.113.0/24"], public_ssh_port=2222, private_ssh_port=22)

    mocks = run(lambda: create_security_groups("t", args, pulumi.ResourceOptions()))

    bastion, _ = mocks.created("SecurityGroup")

    [ingress] = bastion["ingress"]
    assert ingress["protocol"] == "tcp"
    assert (ingress["fromPort"], ingress["toPort"]) == (2222, 2222)
    assert ingress["cidrBlocks"] == ["10.0.1.0/24", "10.0.2.0/24", "203.0.113.0/24"]
    [egress] = bastion["egress"]
    assert egress["protocol"] == "-1"
    assert egress["cidrBlocks"] == ["0.0.0.0/0"]
    assert bastion["vpcId"] == "vpc-0123456789abcdef0"


def test_private_instances_reachable_only_from_bastion(run, make_args):
    mocks = run(lambda: create_security_groups("t", make_args(), pulumi.ResourceOptions()))

    _, private = mocks.created("SecurityGroup")
    [ingress] = private["ingress"]
    assert ingress["securityGroups"] == ["t-host-sg-id"]
    assert not ingress.get("cidrBlocks")
    assert not ingress.get("ipv6CidrBlocks")
    assert (ingress["fromPort"], ingress["toPort"]) == (22, 22)
