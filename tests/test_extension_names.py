"""Tests for unique extension name allocation."""

from depgraph.extensions import extension_usages_by_id
from depgraph.labels import MAIN_REPOSITORY, Label, RepositoryMapping, RepositoryName
from depgraph.models import (
    ROOT,
    DepGraph,
    ExtensionId,
    ExtensionUsage,
    Location,
    Module,
    NamedModuleKey,
    canonical_repo_name,
)
from depgraph.naming import allocate_names, best_name, unique_extension_names


def ext(repo, name, file="ext.bzl"):
    return ExtensionId(Label(RepositoryName(repo), "", file), name)


def make_module(key, usages, deps=None, repo=None):
    repo = repo or canonical_repo_name(key)
    name = "" if key is ROOT else key.name
    return Module(key, name, "", repo, RepositoryMapping.create(deps or {}, repo), tuple(usages))


def usage(bzl_file, name, line=1):
    return ExtensionUsage(bzl_file, name, Location("MODULE.yaml", line, 1))


class TestBestName:
    """Test the preferred name of an extension."""

    def test_main_repository_uses_sentinel(self):
        assert best_name(ext("", "foo")) == "_main~foo"

    def test_other_repository_uses_its_name(self):
        assert best_name(ext("rules_foo~1.0", "deps")) == "rules_foo~1.0~deps"

    def test_names_never_start_with_separator(self):
        assert not best_name(ext("", "foo")).startswith("~")


class TestAllocateNames:
    """Test allocate_names and unique_extension_names."""

    def test_root_usage_example(self):
        graph = DepGraph([make_module(ROOT, [usage("//:extensions.bzl", "foo")])])
        names = unique_extension_names(extension_usages_by_id(graph))
        ext_id = ExtensionId(Label(MAIN_REPOSITORY, "", "extensions.bzl"), "foo")
        assert dict(names.by_name) == {"_main~foo": ext_id}

    def test_collisions_get_increasing_suffixes(self):
        ids = [ext("shared", "ext", f"f{i}.bzl") for i in range(4)]
        names = allocate_names(ids)
        assert [names.name_of(i) for i in ids] == ["shared~ext", "shared~ext2", "shared~ext3", "shared~ext4"]

    def test_suffix_skips_names_already_taken(self):
        first = ext("shared", "ext2")
        second = ext("shared", "ext", "a.bzl")
        third = ext("shared", "ext", "b.bzl")
        names = allocate_names([first, second, third])
        assert names.name_of(first) == "shared~ext2"
        assert names.name_of(second) == "shared~ext"
        assert names.name_of(third) == "shared~ext3"

    def test_first_encountered_module_wins(self):
        # alpha and beta both use an extension living in a repo named "shared",
        # through different files, so the ids differ but the best name is equal.
        shared = RepositoryName("shared")
        alpha = NamedModuleKey("alpha", "1")
        beta = NamedModuleKey("beta", "1")
        alpha_mod = make_module(alpha, [usage("@s//:a.bzl", "ext")], {"s": "shared"})
        beta_mod = make_module(beta, [usage("@s//:b.bzl", "ext")], {"s": "shared"})

        names = unique_extension_names(extension_usages_by_id(DepGraph([alpha_mod, beta_mod])))
        assert names.name_of(ExtensionId(Label(shared, "", "a.bzl"), "ext")) == "shared~ext"
        assert names.name_of(ExtensionId(Label(shared, "", "b.bzl"), "ext")) == "shared~ext2"

        names = unique_extension_names(extension_usages_by_id(DepGraph([beta_mod, alpha_mod])))
        assert names.name_of(ExtensionId(Label(shared, "", "b.bzl"), "ext")) == "shared~ext"
        assert names.name_of(ExtensionId(Label(shared, "", "a.bzl"), "ext")) == "shared~ext2"

    def test_round_trip(self):
        ids = [ext("", "a"), ext("x~1", "a"), ext("x~1", "a", "other.bzl"), ext("", "b")]
        names = allocate_names(ids)
        assert len(names) == len(ids)
        for name in names.by_name:
            assert names.name_of(names.id_of(name)) == name
        for ext_id in ids:
            assert names.id_of(names.name_of(ext_id)) == ext_id

    def test_every_row_is_named_once(self):
        graph = DepGraph([
            make_module(ROOT, [usage("//:e.bzl", "a", 1), usage("//:e.bzl", "b", 2)]),
            make_module(NamedModuleKey("m", "1"), [usage("//:e.bzl", "a")]),
        ])
        table = extension_usages_by_id(graph)
        names = unique_extension_names(table)
        assert set(names.by_id) == set(table.row_keys())
        assert len(set(names.by_name)) == len(table.row_keys())
        assert all(not n.startswith("~") for n in names.by_name)

    def test_deterministic(self):
        ids = [ext("shared", "ext", f"f{i}.bzl") for i in range(3)] + [ext("", "ext")]
        assert list(allocate_names(ids).by_name.items()) == list(allocate_names(list(ids)).by_name.items())
