import pulumi
import pytest

from bastion_host.config import BastionArgs

AMI_ID = "ami-0123456789abcdef0"
REGION = "eu-west-1"
SUBNET_CIDRS = {
    "subnet-elb-a": "10.0.1.0/24",
    "subnet-elb-b": "10.0.2.0/24",
}


class BastionMocks(pulumi.runtime.Mocks):
    """Records every registered resource and answers the lookups the program makes."""

    def __init__(self):
        self.resources = []

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        state = dict(args.inputs)
        kind = args.typ.split(":")[-1]
        if kind == "BucketV2":
            state["arn"] = f"arn:aws:s3:::{args.inputs['bucket']}"
        elif kind == "LoadBalancer":
            state["dnsName"] = f"{args.name}-0123456789.elb.{REGION}.amazonaws.com"
            state["zoneId"] = "Z2IFOLAFXWLO4F"
        elif kind == "Record":
            state["fqdn"] = args.inputs["name"]
        state.setdefault("arn", f"arn:aws:mock:{REGION}:123456789012:{kind.lower()}/{args.name}")
        state.setdefault("name", args.name)
        self.resources.append((kind, args.name, dict(args.inputs)))
        return [f"{args.name}-id", state]

    def call(self, args: pulumi.runtime.MockCallArgs):
        if args.token == "aws:ec2/getAmi:getAmi":
            return {"id": AMI_ID, "imageId": AMI_ID, "architecture": "x86_64"}
        if args.token == "aws:ec2/getSubnet:getSubnet":
            subnet_id = args.args["id"]
            return {"id": subnet_id, "cidrBlock": SUBNET_CIDRS[subnet_id]}
        return {}

    def created(self, kind):
        return [inputs for k, _, inputs in self.resources if k == kind]


@pytest.fixture
def mocks():
    m = BastionMocks()
    pulumi.runtime.set_mocks(m, project="bastion", stack="test", preview=False)
    return m


@pytest.fixture
def make_args():
    def _make(**overrides):
        values = dict(
            region=REGION,
            bucket_name="acme-bastion-logs",
            vpc_id="vpc-0123456789abcdef0",
            elb_subnets=["subnet-elb-a", "subnet-elb-b"],
            auto_scaling_group_subnets=["subnet-asg-a", "subnet-asg-b"],
            tags={"project": "bastion"},
        )
        values.update(overrides)
        return BastionArgs(**values)
    return _make


@pytest.fixture
def run(mocks):
    """Run resource-creating code under the mocks and wait for every registration."""
    def _run(fn):
        pulumi.runtime.test(fn)()
        return mocks
    return _run


@pytest.fixture
def logged(monkeypatch):
    """Captures pulumi.log.info / pulumi.log.warn messages by severity."""
    messages = {"info": [], "warn": []}

    def recorder(severity):
        def _log(msg, resource=None, stream_id=None, ephemeral=None):
            messages[severity].append(msg)
        return _log

    monkeypatch.setattr(pulumi.log, "info", recorder("info"))
    monkeypatch.setattr(pulumi.log, "warn", recorder("warn"))
    return messages
