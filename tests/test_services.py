import io
import unittest

from botocore.exceptions import ClientError

from oss_filesystem.exceptions import BatchDeleteError
from oss_filesystem.profiles import ConnectionProfile
from oss_filesystem.services import OssObjectService, create_client
from fakes import FakeS3Client, ScriptedListClient, client_error


class CreateClientTests(unittest.TestCase):
    def test_builds_s3_client_for_oss_endpoint(self):
        captured = {}

        def factory(service_name, **kwargs):
            captured["service_name"] = service_name
            captured.update(kwargs)
            return "client"

        profile = ConnectionProfile(
            name="alpha",
            endpoint_url="oss-cn-hangzhou.aliyuncs.com",
            access_key="access",
            secret_key="secret",
            region="oss-cn-hangzhou",
        )

        client = create_client(profile, client_factory=factory)

        self.assertEqual("client", client)
        self.assertEqual("s3", captured["service_name"])
        self.assertEqual("https://oss-cn-hangzhou.aliyuncs.com", captured["endpoint_url"])
        self.assertEqual("access", captured["aws_access_key_id"])
        self.assertEqual("secret", captured["aws_secret_access_key"])
        self.assertEqual("oss-cn-hangzhou", captured["region_name"])
        self.assertEqual("s3v4", captured["config"].signature_version)

    def test_keeps_explicit_scheme_and_blank_region(self):
        captured = {}
        profile = ConnectionProfile("beta", "http://localhost:9000", "a", "s")

        create_client(profile, client_factory=lambda *_, **kwargs: captured.update(kwargs))

        self.assertEqual("http://localhost:9000", captured["endpoint_url"])
        self.assertIsNone(captured["region_name"])


class OssObjectServiceTests(unittest.TestCase):
    def setUp(self):
        self.client = FakeS3Client()
        self.service = OssObjectService(self.client)

    def test_put_and_get_object(self):
        self.service.put_object("test", "a.txt", b"hello", {"ContentType": "text/plain"})

        self.assertEqual(b"hello", self.service.get_object("test", "a.txt"))
        self.assertEqual("text/plain", self.client.calls_to("put_object")[0]["ContentType"])

    def test_get_object_writes_into_sink(self):
        self.service.put_object("test", "a.txt", b"hello")
        sink = io.BytesIO()

        result = self.service.get_object("test", "a.txt", sink=sink)

        self.assertIsNone(result)
        self.assertEqual(b"hello", sink.getvalue())

    def test_upload_stream_passes_extra_args(self):
        self.service.upload_stream("test", "a.txt", io.BytesIO(b"data"), {"ACL": "private"})

        self.assertEqual({"ACL": "private"}, self.client.calls_to("upload_fileobj")[0]["ExtraArgs"])
        self.assertEqual(b"data", self.client.stored("a.txt").body)

    def test_does_object_exist(self):
        self.service.put_object("test", "a.txt", b"")

        self.assertTrue(self.service.does_object_exist("test", "a.txt"))
        self.assertFalse(self.service.does_object_exist("test", "missing.txt"))

    def test_does_object_exist_raises_for_other_errors(self):
        self.client.fail("head_object", client_error("AccessDenied", "HeadObject"))

        with self.assertRaises(ClientError):
            self.service.does_object_exist("test", "a.txt")

    def test_copy_object_uses_copy_source(self):
        self.service.put_object("test", "a.txt", b"data")

        self.service.copy_object("test", "a.txt", "test", "b.txt", {"ACL": "public-read"})

        call = self.client.calls_to("copy_object")[0]
        self.assertEqual({"Bucket": "test", "Key": "a.txt"}, call["CopySource"])
        self.assertEqual("public-read", call["ACL"])
        self.assertEqual(b"data", self.client.stored("b.txt").body)

    def test_delete_objects_rejects_oversized_batches(self):
        with self.assertRaises(ValueError):
            self.service.delete_objects("test", [str(index) for index in range(1001)])
        self.assertEqual([], self.client.calls_to("delete_objects"))

    def test_delete_objects_raises_on_reported_errors(self):
        self.service.put_object("test", "a.txt", b"")
        self.service.put_object("test", "b.txt", b"")
        self.client.delete_errors = ["b.txt"]

        with self.assertRaises(BatchDeleteError) as caught:
            self.service.delete_objects("test", ["a.txt", "b.txt"])

        self.assertEqual("b.txt", caught.exception.errors[0]["Key"])

    def test_list_objects_translates_response(self):
        self.service.put_object("test", "dir/a.txt", b"abc")
        self.service.put_object("test", "dir/sub/b.txt", b"")

        page = self.service.list_objects("test", prefix="dir/", delimiter="/", max_keys=1000)

        self.assertEqual(["dir/a.txt"], [entry.key for entry in page.objects])
        self.assertEqual(3, page.objects[0].size)
        self.assertEqual(["dir/sub/"], page.prefixes)
        self.assertIsNone(page.next_marker)

    def test_list_objects_omits_empty_parameters(self):
        client = ScriptedListClient([{"Contents": [], "NextContinuationToken": ""}])

        page = OssObjectService(client).list_objects("test", max_keys=10)

        self.assertEqual({"Bucket": "test", "MaxKeys": 10}, client.list_objects_kwargs[0])
        self.assertIsNone(page.next_marker)

    def test_list_objects_passes_marker_as_continuation_token(self):
        client = ScriptedListClient([{"Contents": [{"Key": "b.txt"}], "NextContinuationToken": "next"}])

        page = OssObjectService(client).list_objects("test", prefix="p/", delimiter="/", marker="token-1")

        kwargs = client.list_objects_kwargs[0]
        self.assertEqual("token-1", kwargs["ContinuationToken"])
        self.assertEqual("p/", kwargs["Prefix"])
        self.assertEqual("/", kwargs["Delimiter"])
        self.assertEqual("next", page.next_marker)

    def test_object_acl_round_trip(self):
        self.service.put_object("test", "a.txt", b"")

        self.assertEqual("private", self.service.get_object_acl("test", "a.txt"))
        self.service.put_object_acl("test", "a.txt", "public-read-write")
        self.assertEqual("public-read-write", self.service.get_object_acl("test", "a.txt"))

    def test_sign_url_maps_method_and_filters_options(self):
        url = self.service.sign_url(
            "test",
            "a.txt",
            60,
            "put",
            {"ContentType": "text/plain", "Unknown": "dropped"},
        )

        call = self.client.calls_to("generate_presigned_url")[0]
        self.assertEqual("put_object", call["ClientMethod"])
        self.assertEqual({"Bucket": "test", "Key": "a.txt", "ContentType": "text/plain"}, call["Params"])
        self.assertEqual(60, call["ExpiresIn"])
        self.assertTrue(url.startswith("https://test.oss-cn-hangzhou.aliyuncs.com/a.txt"))

    def test_sign_url_validates_arguments(self):
        with self.assertRaises(ValueError):
            self.service.sign_url("test", "a.txt", 60, "PATCH")
        with self.assertRaises(ValueError):
            self.service.sign_url("test", "a.txt", 0)
        self.assertEqual([], self.client.calls_to("generate_presigned_url"))


if __name__ == "__main__":
    unittest.main()
