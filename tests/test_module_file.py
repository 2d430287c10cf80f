"""Tests for module file loading and the static resolver."""

import hashlib
import textwrap

import pytest

from depgraph.errors import ResolutionError
from depgraph.labels import MAIN_REPOSITORY, RepositoryName
from depgraph.models import ROOT, Location, NamedModuleKey
from depgraph.ports import StaticEnvironment
from resolution import ModuleFileError, StaticResolver, load_root_module_file

ROOT_MODULE = textwrap.dedent("""\
    module:
      name: my_project
      version: "1.0"
    bazel_deps:
      - name: rules_foo
        version: "1.2"
        repo_name: foo
      - name: skylib
        version: "1.0"
    extension_usages:
      - bzl_file: "//:extensions.bzl"
        name: local
      - bzl_file: "@foo//:ext.bzl"
        name: deps
""")

RESOLVED_GRAPH = textwrap.dedent("""\
    modules:
      - module: {name: rules_foo, version: "1.3"}
        bazel_deps:
          - {name: skylib, version: "1.0"}
        extension_usages:
          - bzl_file: "//:ext.bzl"
            name: deps
            location: {file: rules_foo/MODULE.bazel, line: 12, column: 5}
      - module: {name: skylib, version: "1.1"}
""")


def write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return str(path)


class TestLoadRootModuleFile:
    """Test load_root_module_file."""

    def test_loads_module_and_hash(self, tmp_path):
        path = write(tmp_path, "MODULE.yaml", ROOT_MODULE)

        root = load_root_module_file(path)

        assert root.module_hash == hashlib.sha256(ROOT_MODULE.encode("utf-8")).hexdigest()
        assert root.module.key == ROOT
        assert root.module.name == "my_project"
        assert root.module.canonical_repo_name == MAIN_REPOSITORY
        assert dict(root.bazel_deps) == {"foo": "rules_foo", "skylib": "skylib"}
        assert [u.extension_name for u in root.module.extension_usages] == ["local", "deps"]

    def test_usage_location_comes_from_yaml_position(self, tmp_path):
        path = write(tmp_path, "MODULE.yaml", ROOT_MODULE)
        usages = load_root_module_file(path).module.extension_usages
        assert usages[0].location == Location(path, 11, 5)
        assert usages[1].location == Location(path, 13, 5)

    def test_hash_changes_with_content(self, tmp_path):
        first = load_root_module_file(write(tmp_path, "a.yaml", ROOT_MODULE)).module_hash
        second = load_root_module_file(write(tmp_path, "b.yaml", ROOT_MODULE + "\n# edit\n")).module_hash
        assert first != second

    def test_empty_file_is_an_empty_root(self, tmp_path):
        root = load_root_module_file(write(tmp_path, "MODULE.yaml", ""))
        assert root.module.extension_usages == ()
        assert dict(root.bazel_deps) == {}

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ModuleFileError, match="Failed to parse"):
            load_root_module_file(write(tmp_path, "MODULE.yaml", "module: [unclosed"))

    def test_schema_violation(self, tmp_path):
        content = "extension_usages:\n  - bzl_file: '//:x.bzl'\n"
        with pytest.raises(ModuleFileError, match="extension_usages/0"):
            load_root_module_file(write(tmp_path, "MODULE.yaml", content))

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_root_module_file(str(tmp_path / "missing.yaml"))

    def test_undecodable_bytes(self, tmp_path):
        path = tmp_path / "MODULE.yaml"
        path.write_bytes(b"\xff\xfemodule: {}\n")
        with pytest.raises(ModuleFileError, match="not valid UTF-8"):
            load_root_module_file(str(path))

    def test_unquoted_numeric_version_is_rejected(self, tmp_path):
        content = "module: {name: my_project, version: 1.10}\n"
        with pytest.raises(ModuleFileError, match="module/version"):
            load_root_module_file(write(tmp_path, "MODULE.yaml", content))

    def test_dependency_version_that_is_no_repository_name(self, tmp_path):
        content = "bazel_deps:\n  - {name: rules_foo, version: '1.0 beta'}\n"
        with pytest.raises(ModuleFileError, match="Invalid dependency"):
            load_root_module_file(write(tmp_path, "MODULE.yaml", content))


class TestStaticResolver:
    """Test StaticResolver.resolve."""

    def resolve(self, tmp_path, graph=RESOLVED_GRAPH):
        root = load_root_module_file(write(tmp_path, "MODULE.yaml", ROOT_MODULE))
        resolver = StaticResolver(write(tmp_path, "resolved.yaml", graph))
        return resolver.resolve(root, StaticEnvironment({}))

    def test_graph_order_and_keys(self, tmp_path):
        graph = self.resolve(tmp_path)
        assert list(graph) == [ROOT, NamedModuleKey("rules_foo", "1.3"), NamedModuleKey("skylib", "1.1")]

    def test_root_mapping_uses_selected_versions(self, tmp_path):
        graph = self.resolve(tmp_path)
        mapping = graph[ROOT].repo_mapping
        assert mapping.get("foo") == RepositoryName("rules_foo~1.3")
        assert mapping.get("skylib") == RepositoryName("skylib~1.1")
        assert mapping.get("my_project") == MAIN_REPOSITORY

    def test_module_mapping_contains_only_direct_deps(self, tmp_path):
        graph = self.resolve(tmp_path)
        module = graph[NamedModuleKey("rules_foo", "1.3")]
        assert module.canonical_repo_name == RepositoryName("rules_foo~1.3")
        assert dict(module.repo_mapping.entries) == {
            "rules_foo": RepositoryName("rules_foo~1.3"),
            "skylib": RepositoryName("skylib~1.1"),
        }

    def test_explicit_location_is_kept(self, tmp_path):
        graph = self.resolve(tmp_path)
        usage = graph[NamedModuleKey("rules_foo", "1.3")].extension_usages[0]
        assert usage.location == Location("rules_foo/MODULE.bazel", 12, 5)

    def test_duplicate_module_name(self, tmp_path):
        graph = RESOLVED_GRAPH + "  - module: {name: skylib, version: \"1.2\"}\n"
        with pytest.raises(ResolutionError, match="skylib"):
            self.resolve(tmp_path, graph)

    def test_dependency_missing_from_graph(self, tmp_path):
        graph = "modules:\n  - module: {name: rules_foo, version: '1.3'}\n"
        with pytest.raises(ResolutionError, match="'skylib', which is not in the resolved graph"):
            self.resolve(tmp_path, graph)

    def test_missing_graph_file(self, tmp_path):
        root = load_root_module_file(write(tmp_path, "MODULE.yaml", ROOT_MODULE))
        resolver = StaticResolver(str(tmp_path / "nope.yaml"))
        with pytest.raises(ResolutionError, match="not found"):
            resolver.resolve(root, StaticEnvironment({}))

    def test_graph_without_modules_key(self, tmp_path):
        with pytest.raises(ResolutionError, match="modules"):
            self.resolve(tmp_path, "other: 1\n")

    def test_graph_not_valid_utf8(self, tmp_path):
        root = load_root_module_file(write(tmp_path, "MODULE.yaml", ROOT_MODULE))
        graph_path = tmp_path / "resolved.yaml"
        graph_path.write_bytes(b"modules: []\n# \xff\xfe\n")
        with pytest.raises(ResolutionError, match="not valid UTF-8"):
            StaticResolver(str(graph_path)).resolve(root, StaticEnvironment({}))

    def test_unquoted_numeric_version_is_rejected(self, tmp_path):
        graph = RESOLVED_GRAPH.replace('version: "1.1"', "version: 1.10")
        with pytest.raises(ResolutionError, match="module/version"):
            self.resolve(tmp_path, graph)

    def test_empty_module_name_is_rejected(self, tmp_path):
        graph = RESOLVED_GRAPH + '  - module: {name: "", version: "1"}\n'
        with pytest.raises(ResolutionError, match="module/name"):
            self.resolve(tmp_path, graph)

    def test_version_that_is_no_repository_name(self, tmp_path):
        graph = RESOLVED_GRAPH.replace('version: "1.1"', 'version: "1.1 beta"')
        with pytest.raises(ResolutionError, match="invalid repository name"):
            self.resolve(tmp_path, graph)
