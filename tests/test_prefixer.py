import unittest

from oss_filesystem.prefixer import PathPrefixer


class PathPrefixerTests(unittest.TestCase):
    def test_prefix_is_normalized_once(self):
        self.assertEqual("root/", PathPrefixer("root///").prefix)
        self.assertEqual("root/", PathPrefixer("/root").prefix)
        self.assertEqual("", PathPrefixer("").prefix)
        self.assertEqual("", PathPrefixer("/").prefix)

    def test_empty_path_maps_to_bare_prefix(self):
        self.assertEqual("root/", PathPrefixer("root").prefix_path(""))
        self.assertEqual("", PathPrefixer("").prefix_path(""))

    def test_prefix_path_collapses_redundant_separators(self):
        prefixer = PathPrefixer("root")

        self.assertEqual("root/a/b/c.txt", prefixer.prefix_path("a//b///c.txt"))
        self.assertEqual("root/a.txt", prefixer.prefix_path("/a.txt"))

    def test_directory_key_always_ends_with_separator(self):
        prefixer = PathPrefixer("root")

        self.assertEqual("root/path/", prefixer.prefix_directory_path("path"))
        self.assertEqual("root/path/", prefixer.prefix_directory_path("path/"))
        self.assertEqual("path/", PathPrefixer("").prefix_directory_path("path"))

    def test_strip_prefix_is_left_inverse_of_prefix_path(self):
        for prefix in ("", "root", "deep/root/"):
            prefixer = PathPrefixer(prefix)
            for path in ("", "a.txt", "a/b/c.txt", "a//b.txt", "/lead.txt", "dir/"):
                with self.subTest(prefix=prefix, path=path):
                    self.assertEqual(
                        prefixer.normalize(path),
                        prefixer.strip_prefix(prefixer.prefix_path(path)),
                    )

    def test_strip_directory_prefix_trims_trailing_separator(self):
        prefixer = PathPrefixer("root")

        self.assertEqual("a/b", prefixer.strip_directory_prefix("root/a/b/"))


if __name__ == "__main__":
    unittest.main()
