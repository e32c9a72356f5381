"""Unit tests for the Tekton pipeline trigger client."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from kubernetes.client.exceptions import ApiException

from githook.errors import PipelineTemplateError, PlatformError
from githook.pipeline import PipelineClient, PipelineOptions
from githook.pipeline.variables import replace_vars, shorten

GIT_URL = "https://github.com/acme/widgets.git"
COMMIT = "0123456789abcdef0123456789abcdef01234567"


def _options(run_spec=None, **overrides) -> PipelineOptions:
    spec = run_spec if run_spec is not None else {
        "pipelineRef": {"name": "build"},
        "params": [{"name": "tag", "value": "$COMMIT"}],
    }
    values = dict(
        namespace="ci",
        prefix="demo",
        git_url=GIT_URL,
        git_revision="main",
        git_commit=COMMIT,
        run_spec_json=json.dumps(spec),
    )
    values.update(overrides)
    return PipelineOptions(**values)


def _git_resource(name: str, url: str, resource_type: str = "git") -> dict:
    return {
        "metadata": {"name": name},
        "spec": {"type": resource_type, "params": [{"name": "url", "value": url}]},
    }


def _api(resources=None) -> MagicMock:
    api = MagicMock()
    api.list_namespaced_custom_object.return_value = {"items": resources or []}

    def create(group, version, namespace, plural, body):
        created = json.loads(json.dumps(body))
        created["metadata"]["name"] = created["metadata"]["generateName"] + "x1y2z"
        return created

    api.create_namespaced_custom_object.side_effect = create
    return api


class TestVariables:
    def test_long_commit_truncated_to_ten(self):
        assert shorten(COMMIT) == "0123456789"

    def test_short_commit_unchanged(self):
        assert shorten("abc123") == "abc123"

    def test_exactly_ten_unchanged(self):
        assert shorten("0123456789") == "0123456789"

    def test_replace_vars(self):
        template = '{"a": "$COMMIT", "b": "img:$COMMIT", "c": "$REVISION"}'

        result = json.loads(replace_vars(template, _options()))

        assert result == {"a": "0123456789", "b": "img:0123456789", "c": "main"}


class TestGitResource:
    def test_reuses_matching_resource(self):
        api = _api([
            _git_resource("other", "https://github.com/acme/other.git"),
            _git_resource("image", GIT_URL, resource_type="image"),
            _git_resource("existing", GIT_URL),
        ])

        name = PipelineClient(api).get_or_create_git_resource(_options())

        assert name == "existing"
        api.create_namespaced_custom_object.assert_not_called()

    def test_creates_when_missing(self):
        api = _api()

        name = PipelineClient(api).get_or_create_git_resource(_options())

        assert name == "demo-git-source-x1y2z"
        group, version, namespace, plural, body = api.create_namespaced_custom_object.call_args.args
        assert (group, version, namespace, plural) == ("tekton.dev", "v1alpha1", "ci", "pipelineresources")
        assert body["spec"] == {
            "type": "git",
            "params": [
                {"name": "url", "value": GIT_URL},
                {"name": "revision", "value": "main"},
            ],
        }

    def test_list_error(self):
        api = _api()
        api.list_namespaced_custom_object.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(PlatformError):
            PipelineClient(api).get_or_create_git_resource(_options())


class TestCreatePipelineRun:
    def test_injects_git_source_binding(self):
        api = _api([_git_resource("existing", GIT_URL)])

        run = PipelineClient(api).create_pipeline_run(_options())

        assert run["metadata"]["name"] == "demo-x1y2z"
        assert run["metadata"]["namespace"] == "ci"
        assert run["spec"]["resources"] == [
            {"name": "git-source", "resourceRef": {"name": "existing"}}
        ]
        assert run["spec"]["params"] == [{"name": "tag", "value": "0123456789"}]
        plural = api.create_namespaced_custom_object.call_args.args[3]
        assert plural == "pipelineruns"

    def test_keeps_explicit_resources(self):
        api = _api()
        spec = {
            "pipelineRef": {"name": "build"},
            "resources": [{"name": "source", "resourceRef": {"name": "mine"}}],
        }

        run = PipelineClient(api).create_pipeline_run(_options(run_spec=spec))

        assert run["spec"]["resources"] == spec["resources"]
        api.list_namespaced_custom_object.assert_not_called()

    def test_invalid_template(self):
        api = _api()

        with pytest.raises(PipelineTemplateError):
            PipelineClient(api).create_pipeline_run(_options(run_spec_json="{not json"))

        api.create_namespaced_custom_object.assert_not_called()

    def test_template_must_be_object(self):
        with pytest.raises(PipelineTemplateError):
            PipelineClient(_api()).create_pipeline_run(_options(run_spec_json="[]"))

    def test_create_error(self):
        api = _api([_git_resource("existing", GIT_URL)])
        api.create_namespaced_custom_object.side_effect = ApiException(status=500, reason="boom")

        with pytest.raises(PlatformError, match="pipeline run"):
            PipelineClient(api).create_pipeline_run(_options())
