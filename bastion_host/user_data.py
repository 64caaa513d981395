import base64

import jinja2

TEMPLATE_NAME = "user_data.sh.j2"

# Shell scripts, not HTML: no autoescaping, and every variable must be supplied
jinja2_env = jinja2.Environment(
    loader=jinja2.PackageLoader("bastion_host", "templates"),
    undefined=jinja2.StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def render_user_data(aws_region, bucket_name, allow_ssh_commands=False, extra_user_data_content=""):
    return jinja2_env.get_template(TEMPLATE_NAME).render(
        aws_region=aws_region,
        bucket_name=bucket_name,
        allow_ssh_commands="true" if allow_ssh_commands else "false",
        extra_user_data_content=extra_user_data_content,
    )


def encode_user_data(script):
    return base64.b64encode(script.encode("utf-8")).decode("ascii")
