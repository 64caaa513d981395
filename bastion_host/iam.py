import json
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from bastion_host.config import BastionArgs
from bastion_host.storage import LOGS_PREFIX, PUBLIC_KEYS_PREFIX

ALLOWED_ACTIONS = frozenset({
    "s3:PutObject",
    "s3:PutObjectAcl",
    "s3:GetObject",
    "s3:ListBucket",
    "kms:Encrypt",
    "kms:Decrypt",
})


@dataclass
class Identity:
    role: aws.iam.Role
    policy: aws.iam.Policy
    instance_profile: aws.iam.InstanceProfile


def assume_role_policy_document():
    return {
        "Version": "2012-10-17",
        "Statement": [{
            "Effect": "Allow",
            "Principal": {"Service": "ec2.amazonaws.com"},
            "Action": "sts:AssumeRole",
        }],
    }


def bastion_policy_document(bucket_arn, kms_key_arn):
    """Write logs, read public keys, list public keys, use the bucket key. Nothing else."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Action": ["s3:PutObject", "s3:PutObjectAcl"],
                "Resource": f"{bucket_arn}/{LOGS_PREFIX}*",
            },
            {
                "Effect": "Allow",
                "Action": ["s3:GetObject"],
                "Resource": f"{bucket_arn}/{PUBLIC_KEYS_PREFIX}*",
            },
            {
                "Effect": "Allow",
                "Action": ["s3:ListBucket"],
                "Resource": bucket_arn,
                "Condition": {"StringEquals": {"s3:prefix": PUBLIC_KEYS_PREFIX}},
            },
            {
                "Effect": "Allow",
                "Action": ["kms:Encrypt", "kms:Decrypt"],
                "Resource": kms_key_arn,
            },
        ],
    }


def create_iam(name: str, args: BastionArgs, bucket: aws.s3.BucketV2, key: aws.kms.Key,
               opts: pulumi.ResourceOptions) -> Identity:
    # ----- Role -----
    role = aws.iam.Role(f"{name}-role",
        name=args.bastion_iam_role_name,
        path="/",
        assume_role_policy=json.dumps(assume_role_policy_document()),
        permissions_boundary=args.bastion_iam_permissions_boundary,
        tags=args.tags,
        opts=opts,
    )

    # ----- Policy -----
    policy = aws.iam.Policy(f"{name}-policy",
        name=args.bastion_iam_policy_name,
        policy=pulumi.Output.all(bucket.arn, key.arn).apply(
            lambda arns: json.dumps(bastion_policy_document(arns[0], arns[1]))),
        tags=args.tags,
        opts=opts,
    )

    aws.iam.RolePolicyAttachment(f"{name}-policy-attachment",
        role=role.name,
        policy_arn=policy.arn,
        opts=opts,
    )

    instance_profile = aws.iam.InstanceProfile(f"{name}-profile",
        role=role.name,
        path="/",
        tags=args.tags,
        opts=opts,
    )

    return Identity(role=role, policy=policy, instance_profile=instance_profile)
