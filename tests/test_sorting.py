from foldertree.core.nodes import DirectoryNode, FileNode, iter_nodes
from foldertree.core.sorting import sort_tree


def d(name, *children):
    return DirectoryNode(name=name, path=name, children=list(children))


def f(name):
    return FileNode(name=name, path=name)


def assert_canonical(root):
    for node in iter_nodes(root):
        if not isinstance(node, DirectoryNode):
            continue
        kinds = [isinstance(c, DirectoryNode) for c in node.children]
        assert kinds == sorted(kinds, reverse=True), node.path
        for is_dir in (True, False):
            same = [c.name.casefold() for c in node.children if isinstance(c, DirectoryNode) == is_dir]
            assert same == sorted(same), node.path
        assert len({c.name for c in node.children}) == len(node.children)


def test_directories_precede_files_case_insensitively():
    root = d("r", f("beta.txt"), d("Zeta"), f("Alpha.txt"), d("alpha"), f("_underscore"))

    sort_tree(root)

    assert [c.name for c in root.children] == ["alpha", "Zeta", "_underscore", "Alpha.txt", "beta.txt"]


def test_sort_applies_at_every_depth():
    root = d(
        "r",
        f("z"),
        d("b", f("y"), d("x", f("2"), f("10"), d("deep", f("b"), f("a")))),
        d("a"),
    )

    sort_tree(root)

    assert_canonical(root)
    deep = root.children[1].children[0].children[0]
    assert [c.name for c in deep.children] == ["a", "b"]


def test_names_differing_only_in_case_have_a_stable_order():
    root = d("r", f("readme"), f("README"), f("ReadMe"))

    sort_tree(root)

    assert [c.name for c in root.children] == ["README", "ReadMe", "readme"]


def test_sort_returns_the_same_root():
    root = d("r", f("b"), f("a"))
    assert sort_tree(root) is root
