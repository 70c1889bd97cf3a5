"""CloudFormation fragment for the gateway's IAM principal.

The gateway invokes Lambda functions as a dedicated IAM user. The user, its
policy and access key are declared by the service's own template; this
fragment is merged into it by the caller before deploying.
"""

from typing import Any

from .naming import ACCESS_KEY_OUTPUT, SECRET_KEY_OUTPUT

USER_LOGICAL_ID = "EventGatewayUser"
POLICY_LOGICAL_ID = "EventGatewayUserPolicy"
KEYS_LOGICAL_ID = "EventGatewayUserKeys"


def iam_user_fragment() -> dict[str, Any]:
    """Return the ``Resources`` and ``Outputs`` to merge into a stack template."""
    return {
        "Resources": {
            USER_LOGICAL_ID: {"Type": "AWS::IAM::User"},
            POLICY_LOGICAL_ID: {
                "Type": "AWS::IAM::ManagedPolicy",
                "Properties": {
                    "Description": "Allows the Event Gateway to invoke functions",
                    "PolicyDocument": {
                        "Version": "2012-10-17",
                        "Statement": [
                            {
                                "Effect": "Allow",
                                "Action": ["lambda:InvokeFunction"],
                                "Resource": "*",
                            }
                        ],
                    },
                    "Users": [{"Ref": USER_LOGICAL_ID}],
                },
            },
            KEYS_LOGICAL_ID: {
                "Type": "AWS::IAM::AccessKey",
                "Properties": {"UserName": {"Ref": USER_LOGICAL_ID}},
            },
        },
        "Outputs": {
            ACCESS_KEY_OUTPUT: {
                "Value": {"Ref": KEYS_LOGICAL_ID},
                "Description": "Access Key ID of Event Gateway user",
            },
            SECRET_KEY_OUTPUT: {
                "Value": {"Fn::GetAtt": [KEYS_LOGICAL_ID, "SecretAccessKey"]},
                "Description": "Secret Key of Event Gateway user",
            },
        },
    }


def merge_into_template(template: dict[str, Any]) -> dict[str, Any]:
    """Merge the IAM fragment into ``template`` in place and return it."""
    fragment = iam_user_fragment()
    for section in ("Resources", "Outputs"):
        template.setdefault(section, {}).update(fragment[section])
    return template
