"""Tests for the IAM template fragment."""

from sls_eventgateway.template import iam_user_fragment, merge_into_template


def test_fragment_outputs_match_output_keys():
    fragment = iam_user_fragment()
    assert set(fragment["Outputs"]) == {"EventGatewayUserAccessKey", "EventGatewayUserSecretKey"}
    assert fragment["Outputs"]["EventGatewayUserSecretKey"]["Value"] == {
        "Fn::GetAtt": ["EventGatewayUserKeys", "SecretAccessKey"]
    }


def test_policy_only_allows_invoke():
    policy = iam_user_fragment()["Resources"]["EventGatewayUserPolicy"]["Properties"]
    assert policy["PolicyDocument"]["Statement"] == [
        {"Effect": "Allow", "Action": ["lambda:InvokeFunction"], "Resource": "*"}
    ]


def test_merge_keeps_existing_resources():
    template = {"Resources": {"Bucket": {"Type": "AWS::S3::Bucket"}}}
    merged = merge_into_template(template)
    assert merged is template
    assert "Bucket" in template["Resources"]
    assert "EventGatewayUser" in template["Resources"]
    assert "EventGatewayUserAccessKey" in template["Outputs"]
