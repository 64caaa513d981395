"""
KMS key and S3 bucket backing the bastion.

The bucket has two prefixes:
- logs/         SSH session recordings pushed by every bastion instance.
- public-keys/  one ``<user>.pub`` per SSH user, pulled by every instance.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from bastion_host.config import BastionArgs

LOGS_PREFIX = "logs/"
PUBLIC_KEYS_PREFIX = "public-keys/"
README_KEY = PUBLIC_KEYS_PREFIX + "README.txt"
README_CONTENT = "Drop here the ssh public keys of the instances"


@dataclass
class Storage:
    key: aws.kms.Key
    alias: aws.kms.Alias
    bucket: aws.s3.BucketV2
    readme: aws.s3.BucketObjectv2


def kms_alias_name(bucket_name):
    # KMS aliases do not accept dots
    return "alias/" + bucket_name.replace(".", "_")


def lifecycle_rule(args: BastionArgs) -> aws.s3.BucketLifecycleConfigurationV2RuleArgs:
    return aws.s3.BucketLifecycleConfigurationV2RuleArgs(
        id="log",
        status="Enabled" if args.log_auto_clean else "Disabled",
        filter=aws.s3.BucketLifecycleConfigurationV2RuleFilterArgs(prefix=LOGS_PREFIX),
        transitions=[
            aws.s3.BucketLifecycleConfigurationV2RuleTransitionArgs(
                days=args.log_standard_ia_days,
                storage_class="STANDARD_IA",
            ),
            aws.s3.BucketLifecycleConfigurationV2RuleTransitionArgs(
                days=args.log_glacier_days,
                storage_class="GLACIER",
            ),
        ],
        expiration=aws.s3.BucketLifecycleConfigurationV2RuleExpirationArgs(
            days=args.log_expiry_days,
        ),
    )


def create_storage(name: str, args: BastionArgs, opts: pulumi.ResourceOptions) -> Storage:
    if not args.lifecycle_days_ordered:
        pulumi.log.warn(
            f"log lifecycle days are not increasing (standard_ia={args.log_standard_ia_days}, "
            f"glacier={args.log_glacier_days}, expiry={args.log_expiry_days}); "
            "S3 will reject or reorder the transitions")

    # ----- KMS -----
    key = aws.kms.Key(f"{name}-key",
        description="Encryption key for the bastion logs and public keys bucket",
        enable_key_rotation=args.kms_enable_key_rotation,
        tags=args.tags,
        opts=opts,
    )

    alias = aws.kms.Alias(f"{name}-key-alias",
        name=kms_alias_name(args.bucket_name),
        target_key_id=key.arn,
        opts=opts,
    )

    # ----- Bucket -----
    bucket = aws.s3.BucketV2(f"{name}-bucket",
        bucket=args.bucket_name,
        force_destroy=args.bucket_force_destroy,
        tags=args.tags,
        opts=opts,
    )
    child_opts = pulumi.ResourceOptions.merge(opts, pulumi.ResourceOptions(depends_on=[bucket]))

    ownership = aws.s3.BucketOwnershipControls(f"{name}-bucket-ownership",
        bucket=bucket.id,
        rule=aws.s3.BucketOwnershipControlsRuleArgs(object_ownership="BucketOwnerPreferred"),
        opts=child_opts,
    )

    aws.s3.BucketAclV2(f"{name}-bucket-acl",
        bucket=bucket.id,
        acl="private",
        opts=pulumi.ResourceOptions.merge(opts, pulumi.ResourceOptions(depends_on=[ownership])),
    )

    aws.s3.BucketPublicAccessBlock(f"{name}-bucket-public-access",
        bucket=bucket.id,
        block_public_acls=True,
        block_public_policy=True,
        ignore_public_acls=True,
        restrict_public_buckets=True,
        opts=child_opts,
    )

    aws.s3.BucketVersioningV2(f"{name}-bucket-versioning",
        bucket=bucket.id,
        versioning_configuration=aws.s3.BucketVersioningV2VersioningConfigurationArgs(
            status="Enabled" if args.bucket_versioning else "Disabled",
        ),
        opts=child_opts,
    )

    aws.s3.BucketServerSideEncryptionConfigurationV2(f"{name}-bucket-encryption",
        bucket=bucket.id,
        rules=[aws.s3.BucketServerSideEncryptionConfigurationV2RuleArgs(
            apply_server_side_encryption_by_default=(
                aws.s3.BucketServerSideEncryptionConfigurationV2RuleApplyServerSideEncryptionByDefaultArgs(
                    sse_algorithm="aws:kms",
                    kms_master_key_id=key.arn,
                )),
        )],
        opts=child_opts,
    )

    aws.s3.BucketLifecycleConfigurationV2(f"{name}-bucket-lifecycle",
        bucket=bucket.id,
        rules=[lifecycle_rule(args)],
        opts=child_opts,
    )

    readme = aws.s3.BucketObjectv2(f"{name}-public-keys-readme",
        bucket=bucket.id,
        key=README_KEY,
        content=README_CONTENT,
        kms_key_id=key.arn,
        opts=child_opts,
    )

    return Storage(key=key, alias=alias, bucket=bucket, readme=readme)
