import unittest

from dropboxfs import DropboxFileSystem, FileSystemOptions
from dropboxfs.errors import (
    AlreadyExistsError,
    DepthLimitExceededError,
    InvalidOperationError,
    InvalidStateError,
    NotFoundError,
)
from dropboxfs.models import TreeNode, UploadOption
from fake_store import FakeClock, FakeRemoteStore


class _MutationTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = FakeRemoteStore()
        self.clock = FakeClock()
        self.fs = DropboxFileSystem.from_store(self.store, clock=self.clock)

    def only_child(self, root: TreeNode) -> TreeNode:
        self.assertEqual(len(root.children), 1)
        return next(iter(root.children))


class TestCreate(_MutationTestCase):
    def test_create_file_in_root(self) -> None:
        root = self.fs.create("", "new.txt", False)

        node = self.only_child(root)
        self.assertEqual(node.name, "new.txt")
        self.assertFalse(node.is_directory)
        self.assertEqual(self.store.content_at("/new.txt"), b"")
        self.assertIn(("upload", "/new.txt", False), self.store.calls)
        self.assertIs(node.file_system, self.fs)

    def test_create_folder_under_parent_id(self) -> None:
        parent = self.store.add_folder("/Docs")

        root = self.fs.create(parent.id, "Sub", True)

        node = self.only_child(root)
        self.assertTrue(node.is_directory)
        self.assertEqual(node.path, "/Docs/Sub")
        self.assertTrue(self.store.has_path("/Docs/Sub"))

    def test_created_item_is_cached(self) -> None:
        node = self.only_child(self.fs.create("", "new.txt", False))
        before = self.store.count("get_metadata")
        self.assertIsNotNone(self.fs.get(node.id))
        self.assertEqual(self.store.count("get_metadata"), before)

    def test_error_policy_raises_and_does_not_mutate(self) -> None:
        self.store.add_file("/a.txt", b"keep")

        with self.assertRaises(AlreadyExistsError) as cm:
            self.fs.create("", "a.txt", False, UploadOption.ERROR)

        self.assertEqual(str(cm.exception), "File a.txt already exists")
        self.assertEqual(self.store.mutation_calls(), [])
        self.assertEqual(self.store.content_at("/a.txt"), b"keep")

    def test_error_is_the_default_policy(self) -> None:
        self.store.add_folder("/Docs")
        with self.assertRaises(AlreadyExistsError):
            self.fs.create("", "Docs", True)

    def test_skip_exist_returns_none(self) -> None:
        self.store.add_file("/a.txt", b"keep")

        result = self.fs.create("", "a.txt", False, UploadOption.SKIP_EXIST)

        self.assertIsNone(result)
        self.assertEqual(self.store.mutation_calls(), [])
        self.assertEqual(self.store.content_at("/a.txt"), b"keep")

    def test_replace_overwrites_file_without_probe(self) -> None:
        existing = self.store.add_file("/a.txt", b"old")

        node = self.only_child(self.fs.create("", "a.txt", False, UploadOption.REPLACE))

        self.assertEqual(node.id, existing.id)
        self.assertEqual(self.store.content_at("/a.txt"), b"")
        self.assertEqual(self.store.count("get_metadata"), 0)
        self.assertIn(("upload", "/a.txt", True), self.store.calls)

    def test_replace_reuses_existing_folder(self) -> None:
        existing = self.store.add_folder("/Docs")
        self.store.add_file("/Docs/inner.txt", b"x")

        node = self.only_child(self.fs.create("", "Docs", True, UploadOption.REPLACE))

        self.assertEqual(node.id, existing.id)
        self.assertTrue(self.store.has_path("/Docs/inner.txt"))

    def test_append_on_directory_is_rejected_before_any_call(self) -> None:
        with self.assertRaises(InvalidOperationError):
            self.fs.create("", "Docs", True, UploadOption.APPEND)
        self.assertEqual(self.store.mutation_calls(), [])
        self.assertEqual(self.store.count("get_metadata"), 0)

    def test_append_on_existing_file_keeps_content(self) -> None:
        existing = self.store.add_file("/a.txt", b"data")

        node = self.only_child(self.fs.create("", "a.txt", False, UploadOption.APPEND))

        self.assertEqual(node.id, existing.id)
        self.assertEqual(self.store.content_at("/a.txt"), b"data")
        self.assertEqual(self.store.mutation_calls(), [])

    def test_append_on_missing_file_creates_it(self) -> None:
        self.fs.create("", "a.txt", False, UploadOption.APPEND)
        self.assertEqual(self.store.content_at("/a.txt"), b"")

    def test_append_onto_folder_of_same_name_is_rejected(self) -> None:
        self.store.add_folder("/a.txt")
        with self.assertRaises(InvalidOperationError):
            self.fs.create("", "a.txt", False, UploadOption.APPEND)

    def test_invalid_name_is_rejected(self) -> None:
        for name in ("", "..", "a/b"):
            with self.subTest(name=name):
                with self.assertRaises(InvalidOperationError):
                    self.fs.create("", name, False)
        self.assertEqual(self.store.mutation_calls(), [])


class TestRename(_MutationTestCase):
    def test_rename_moves_and_invalidates(self) -> None:
        md = self.store.add_file("/a.txt", b"x")
        self.fs.get(md.id)

        node = self.only_child(self.fs.rename(md.id, "b.txt"))

        self.assertEqual(node.id, md.id)
        self.assertEqual(node.name, "b.txt")
        self.assertFalse(self.store.has_path("/a.txt"))
        self.assertEqual(self.store.content_at("/b.txt"), b"x")
        self.assertEqual(self.fs.get(md.id).path, "/b.txt")

    def test_rename_keeps_parent_folder(self) -> None:
        self.store.add_folder("/Docs")
        md = self.store.add_file("/Docs/a.txt")

        self.fs.rename(md.id, "b.txt")

        self.assertTrue(self.store.has_path("/Docs/b.txt"))

    def test_rename_missing_item(self) -> None:
        with self.assertRaises(NotFoundError) as cm:
            self.fs.rename("id:404", "b.txt")
        self.assertEqual(str(cm.exception), "File 'id:404' not found")
        self.assertEqual(self.store.mutation_calls(), [])

    def test_rename_error_policy(self) -> None:
        md = self.store.add_file("/a.txt", b"a")
        self.store.add_file("/b.txt", b"b")

        with self.assertRaises(AlreadyExistsError):
            self.fs.rename(md.id, "b.txt", UploadOption.ERROR)

        self.assertEqual(self.store.mutation_calls(), [])

    def test_rename_skip_exist(self) -> None:
        md = self.store.add_file("/a.txt", b"a")
        self.store.add_file("/b.txt", b"b")

        self.assertIsNone(self.fs.rename(md.id, "b.txt", UploadOption.SKIP_EXIST))
        self.assertTrue(self.store.has_path("/a.txt"))
        self.assertEqual(self.store.mutation_calls(), [])

    def test_rename_replace_removes_target(self) -> None:
        md = self.store.add_file("/a.txt", b"a")
        target = self.store.add_file("/b.txt", b"b")

        node = self.only_child(self.fs.rename(md.id, "b.txt", UploadOption.REPLACE))

        self.assertEqual(node.id, md.id)
        self.assertEqual(self.store.content_at("/b.txt"), b"a")
        self.assertIn(("delete", target.id), self.store.calls)
        self.assertIsNone(self.fs.get(target.id))

    def test_rename_append_behaves_like_replace(self) -> None:
        md = self.store.add_file("/a.txt", b"a")
        self.store.add_file("/b.txt", b"b")

        self.fs.rename(md.id, "b.txt", UploadOption.APPEND)

        self.assertEqual(self.store.content_at("/b.txt"), b"a")

    def test_case_only_rename_is_not_a_conflict(self) -> None:
        md = self.store.add_file("/a.txt")

        node = self.only_child(self.fs.rename(md.id, "A.txt", UploadOption.ERROR))

        self.assertEqual(node.name, "A.txt")

    def test_rename_child_after_parent_folder_rename(self) -> None:
        folder = self.store.add_folder("/A")
        child = self.store.add_file("/A/c.txt", b"c")
        self.fs.list_children_recursive("")
        self.fs.get(child.id)

        self.fs.rename(folder.id, "X")
        self.fs.rename(child.id, "new.txt")

        self.assertEqual(self.store.content_at("/X/new.txt"), b"c")
        self.assertFalse(self.store.has_path("/A"))
        self.assertFalse(self.store.has_path("/A/new.txt"))

    def test_folder_rename_drops_cached_descendants(self) -> None:
        folder = self.store.add_folder("/A")
        child = self.store.add_file("/A/c.txt")
        self.fs.get(child.id)

        self.fs.rename(folder.id, "X")

        self.assertEqual(self.fs.get(child.id).path, "/X/c.txt")

    def test_rename_of_item_deleted_remotely(self) -> None:
        md = self.store.add_file("/a.txt")
        self.fs.get(md.id)
        self.store.delete(md.id)

        with self.assertRaises(NotFoundError):
            self.fs.rename(md.id, "b.txt")

        self.assertEqual(self.store.count("move"), 0)


class TestDelete(_MutationTestCase):
    def test_delete_many(self) -> None:
        a = self.store.add_file("/a.txt")
        b = self.store.add_folder("/B")
        self.store.add_file("/B/c.txt")
        self.fs.list_children("")

        root = self.fs.delete([a.id, b.id])

        self.assertEqual({n.id for n in root.children}, {a.id, b.id})
        self.assertFalse(self.store.has_path("/a.txt"))
        self.assertFalse(self.store.has_path("/B/c.txt"))
        self.assertIsNone(self.fs.get(a.id))
        self.assertFalse(self.fs.exists(b.id))

    def test_reader_during_delete_does_not_resurrect_entry(self) -> None:
        md = self.store.add_file("/a.txt")
        seen = []
        self.store.on_delete = lambda item_id: seen.append(self.fs.get(item_id))

        self.fs.delete([md.id])

        self.assertEqual(seen, [md])
        self.assertEqual(len(self.fs.cache), 0)
        self.assertIsNone(self.fs.get(md.id))

    def test_delete_is_fail_fast(self) -> None:
        a = self.store.add_file("/a.txt")
        c = self.store.add_file("/c.txt")

        with self.assertRaises(NotFoundError):
            self.fs.delete([a.id, "id:404", c.id])

        self.assertFalse(self.store.has_path("/a.txt"))
        self.assertTrue(self.store.has_path("/c.txt"))

    def test_folder_delete_removes_listed_and_cached_children(self) -> None:
        folder = self.store.add_folder("/B")
        child = self.store.add_file("/B/c.txt")
        self.fs.list_children(folder.id)
        self.fs.get(child.id)

        self.fs.delete([folder.id])

        self.assertFalse(self.store.has_path("/B/c.txt"))
        self.assertFalse(self.fs.exists(child.id))

    def test_listing_during_delete_does_not_resurrect_entries(self) -> None:
        folder = self.store.add_folder("/B")
        child = self.store.add_file("/B/c.txt")
        listed = []
        self.store.on_delete = lambda item_id: listed.append(self.fs.list_children(folder.id))

        self.fs.delete([folder.id])

        self.assertEqual({n.id for n in listed[0]}, {child.id})
        self.assertEqual(len(self.fs.cache), 0)
        self.assertFalse(self.fs.exists(child.id))
        self.assertFalse(self.fs.exists(folder.id))

    def test_reader_of_child_during_folder_delete(self) -> None:
        folder = self.store.add_folder("/B")
        child = self.store.add_file("/B/c.txt")
        self.store.on_delete = lambda item_id: self.fs.get(child.id)

        self.fs.delete([folder.id])

        self.assertIsNone(self.fs.get(child.id))

    def test_delete_nothing(self) -> None:
        root = self.fs.delete([])
        self.assertEqual(root.children, set())


class TestCopy(_MutationTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.src = self.store.add_folder("/src")
        self.dst = self.store.add_folder("/dst")
        self.store.add_file("/src/f.txt", b"new")

    def source_node(self, name: str) -> TreeNode:
        node = next(n for n in self.fs.list_children(self.src.id) if n.name == name)
        self.store.calls.clear()
        return node

    def test_copy_file(self) -> None:
        entry = self.source_node("f.txt")

        root = self.fs.copy([entry], self.dst.id)

        node = self.only_child(root)
        self.assertEqual(node.path, "/dst/f.txt")
        self.assertEqual(self.store.content_at("/dst/f.txt"), b"new")
        self.assertEqual(self.store.content_at("/src/f.txt"), b"new")

    def test_copy_error_policy(self) -> None:
        self.store.add_file("/dst/f.txt", b"old")
        entry = self.source_node("f.txt")

        with self.assertRaises(AlreadyExistsError):
            self.fs.copy([entry], self.dst.id, UploadOption.ERROR)

        self.assertEqual(self.store.mutation_calls(), [])
        self.assertEqual(self.store.content_at("/dst/f.txt"), b"old")

    def test_copy_skip_exist_omits_item(self) -> None:
        self.store.add_file("/dst/f.txt", b"old")
        entry = self.source_node("f.txt")

        root = self.fs.copy([entry], self.dst.id, UploadOption.SKIP_EXIST)

        self.assertEqual(root.children, set())
        self.assertEqual(self.store.content_at("/dst/f.txt"), b"old")
        self.assertEqual(self.store.mutation_calls(), [])

    def test_copy_replace_overwrites(self) -> None:
        self.store.add_file("/dst/f.txt", b"old")
        entry = self.source_node("f.txt")

        self.fs.copy([entry], self.dst.id, UploadOption.REPLACE)

        self.assertEqual(self.store.content_at("/dst/f.txt"), b"new")
        self.assertEqual(self.store.count("get_metadata"), 0)

    def test_copy_append_concatenates_exactly(self) -> None:
        self.store.add_file("/dst/f.txt", b"old-")
        entry = self.source_node("f.txt")

        node = self.only_child(self.fs.copy([entry], self.dst.id, UploadOption.APPEND))

        self.assertEqual(self.store.content_at("/dst/f.txt"), b"old-new")
        self.assertEqual(node.size, len(b"old-new"))

    def test_copy_append_without_existing_target_is_plain_copy(self) -> None:
        entry = self.source_node("f.txt")
        self.fs.copy([entry], self.dst.id, UploadOption.APPEND)
        self.assertEqual(self.store.content_at("/dst/f.txt"), b"new")
        self.assertEqual(self.store.count("download"), 1)

    def test_copy_directory_recursively(self) -> None:
        self.store.add_folder("/src/A")
        self.store.add_file("/src/A/B.txt", b"b")
        entry = self.source_node("A")

        root = self.fs.copy([entry], self.dst.id)

        a_node = root.find_child("A")
        self.assertIsNotNone(a_node)
        self.assertTrue(a_node.is_directory)
        b_node = a_node.find_child("B.txt")
        self.assertIsNotNone(b_node)
        self.assertEqual(self.store.content_at("/dst/A/B.txt"), b"b")

    def test_copy_directory_onto_existing_folder_with_replace(self) -> None:
        self.store.add_folder("/src/A")
        self.store.add_file("/src/A/B.txt", b"b")
        existing = self.store.add_folder("/dst/A")
        entry = self.source_node("A")

        root = self.fs.copy([entry], self.dst.id, UploadOption.REPLACE)

        self.assertEqual(root.find_child("A").id, existing.id)
        self.assertEqual(self.store.content_at("/dst/A/B.txt"), b"b")

    def test_copy_directory_onto_file_with_append_is_rejected(self) -> None:
        self.store.add_folder("/src/A")
        self.store.add_file("/dst/A", b"file")
        entry = self.source_node("A")

        with self.assertRaises(InvalidOperationError):
            self.fs.copy([entry], self.dst.id, UploadOption.APPEND)

    def test_copy_directory_respects_max_depth(self) -> None:
        fs = DropboxFileSystem.from_store(
            self.store,
            options=FileSystemOptions(max_depth=1),
            clock=self.clock,
        )
        self.store.add_folder("/src/A")
        self.store.add_file("/src/A/B.txt", b"b")
        entry = next(n for n in fs.list_children(self.src.id) if n.name == "A")

        with self.assertRaises(DepthLimitExceededError):
            fs.copy([entry], self.dst.id)

    def test_copy_directory_without_file_system(self) -> None:
        entry = TreeNode(is_directory=True, name="A", id="id:999")
        with self.assertRaises(InvalidStateError):
            self.fs.copy([entry], self.dst.id)


if __name__ == "__main__":
    unittest.main()
