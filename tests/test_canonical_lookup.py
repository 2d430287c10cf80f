"""Tests for the canonical repository name lookup and graph model invariants."""

import pytest

from depgraph.canonical import canonical_repo_name_lookup
from depgraph.errors import GraphInvariantError, LabelSyntaxError
from depgraph.labels import MAIN_REPOSITORY, RepositoryMapping, RepositoryName
from depgraph.models import ROOT, DepGraph, Module, NamedModuleKey, canonical_repo_name


def make_module(key, repo_name=None):
    repo = repo_name if repo_name is not None else canonical_repo_name(key)
    name = "" if key is ROOT else key.name
    version = "" if key is ROOT else key.version
    return Module(key, name, version, repo, RepositoryMapping({}, repo))


def test_lookup_maps_every_module():
    a = NamedModuleKey("a", "1.0")
    b = NamedModuleKey("b", "2.0")
    graph = DepGraph([make_module(ROOT), make_module(a), make_module(b)])

    lookup = canonical_repo_name_lookup(graph)

    assert lookup == {
        MAIN_REPOSITORY: ROOT,
        RepositoryName("a~1.0"): a,
        RepositoryName("b~2.0"): b,
    }
    assert len(set(lookup.values())) == len(graph)


def test_lookup_is_read_only():
    lookup = canonical_repo_name_lookup(DepGraph([make_module(ROOT)]))
    with pytest.raises(TypeError):
        lookup[RepositoryName("x")] = ROOT  # type: ignore[index]


def test_shared_canonical_name_is_an_invariant_violation():
    a = NamedModuleKey("a", "1.0")
    b = NamedModuleKey("b", "1.0")
    graph = DepGraph([make_module(a, RepositoryName("same")), make_module(b, RepositoryName("same"))])
    with pytest.raises(GraphInvariantError, match="share canonical repository"):
        canonical_repo_name_lookup(graph)


def test_duplicate_module_key_is_rejected():
    a = NamedModuleKey("a", "1.0")
    with pytest.raises(GraphInvariantError):
        DepGraph([make_module(a), make_module(a)])


class TestCanonicalRepoName:
    """Test derivation of canonical repository names from module keys."""

    def test_root_is_main_repository(self):
        assert canonical_repo_name(ROOT).is_main

    def test_named_module(self):
        assert canonical_repo_name(NamedModuleKey("rules_go", "0.39.1")).name == "rules_go~0.39.1"

    def test_overridden_module(self):
        assert canonical_repo_name(NamedModuleKey("rules_go", "")).name == "rules_go~override"

    def test_graph_preserves_insertion_order(self):
        keys = [ROOT, NamedModuleKey("z", "1"), NamedModuleKey("a", "1")]
        graph = DepGraph(make_module(k) for k in keys)
        assert list(graph) == keys

    def test_empty_module_name_is_rejected(self):
        with pytest.raises(LabelSyntaxError, match="must not start with '~'"):
            canonical_repo_name(NamedModuleKey("", "1"))

    def test_invalid_characters_are_rejected(self):
        with pytest.raises(LabelSyntaxError):
            canonical_repo_name(NamedModuleKey("a", "1.0 beta"))

    def test_equal_graphs_hash_equal(self):
        keys = [ROOT, NamedModuleKey("a", "1")]
        first = DepGraph(make_module(k) for k in keys)
        second = DepGraph(make_module(k) for k in keys)
        assert first == second
        assert hash(first) == hash(second)
