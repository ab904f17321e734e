import io
import json
import tempfile
import unittest
from pathlib import Path

from oss_filesystem.__main__ import build_adapter, build_parser, run
from oss_filesystem.adapter import OssAdapter
from oss_filesystem.profiles import ConnectionProfile, ProfileStorage
from fakes import FakeKeychain, FakeS3Client


class CommandLineTests(unittest.TestCase):
    def setUp(self):
        self.client = FakeS3Client()
        self.adapter = OssAdapter(self.client, "test", "", {"endpoint": "oss-cn-shanghai.aliyuncs.com"})
        self.adapter.write("docs/readme.txt", b"hello")
        self.adapter.write("docs/img/logo.png", b"png")

    def _run(self, *argv):
        args = build_parser().parse_args(["--profile", "alpha", *argv])
        out = io.StringIO()
        code = run(args, self.adapter, out=out)
        return code, out.getvalue()

    def test_ls_prints_files_and_directories(self):
        code, output = self._run("ls", "docs")

        self.assertEqual(0, code)
        self.assertEqual(["           5  docs/readme.txt", "docs/img/"], output.splitlines())

    def test_ls_recursive(self):
        code, output = self._run("ls", "docs", "-r")

        self.assertEqual(0, code)
        self.assertIn("docs/img/", output.splitlines())
        self.assertIn("           3  docs/img/logo.png", output.splitlines())

    def test_exists(self):
        self.assertEqual((0, "yes\n"), self._run("exists", "docs/img"))
        self.assertEqual((1, "no\n"), self._run("exists", "nothing"))

    def test_url_and_sign(self):
        self.assertEqual(
            (0, "https://test.oss-cn-shanghai.aliyuncs.com/docs/readme.txt\n"),
            self._run("url", "docs/readme.txt"),
        )
        code, output = self._run("sign", "docs/readme.txt", "--expires", "60")
        self.assertEqual(0, code)
        self.assertIn("Expires=60", output)

    def test_rmdir(self):
        code, _ = self._run("rmdir", "docs")

        self.assertEqual(0, code)
        self.assertEqual([], self.client.keys())

    def test_build_adapter_uses_profile_and_options(self):
        with tempfile.TemporaryDirectory() as tmp:
            profiles = ProfileStorage(Path(tmp) / "connections.json", keychain=FakeKeychain())
            profiles.save([ConnectionProfile("alpha", "oss-cn-hangzhou.aliyuncs.com", "a", "s", bucket="photos", prefix="root")])
            options_path = Path(tmp) / "options.json"
            options_path.write_text(json.dumps({"endpoint": "oss-cn-hangzhou.aliyuncs.com"}), encoding="utf-8")
            client = FakeS3Client()
            args = build_parser().parse_args(["--profile", "alpha", "--options", str(options_path), "url", "a.jpg"])

            adapter = build_adapter(args, profiles=profiles, client_factory=lambda *_, **__: client)

            self.assertEqual("photos", adapter.bucket)
            self.assertIs(client, adapter.client)
            self.assertEqual("https://photos.oss-cn-hangzhou.aliyuncs.com/root/a.jpg", adapter.get_url("a.jpg"))


if __name__ == "__main__":
    unittest.main()
