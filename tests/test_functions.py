"""
Tests for the function catalog, saved images and their serialization.
"""

import math

import pytest

from blitline_client.exceptions import ConstructionError, SerializationError
from blitline_client.functions import (
    Annotate,
    BackgroundColor,
    Blitline,
    Composite,
    CompositeOp,
    Function,
    Gravity,
    Grayscale,
    ResizeToFill,
)
from blitline_client.saved_image import S3Destination, SavedImage


class TestFunctionSerialization:
    """Tests for Function.to_payload and the wire shape of single functions."""

    def test_background_color_wire_shape(self):
        """A function without saves or children serializes to name and params only."""
        function = BackgroundColor().color("#ff0000")
        assert function.to_payload().model_dump(exclude_none=True) == {
            "name": "background_color",
            "params": {"color": "#ff0000"},
        }

    def test_of_is_an_alias_for_color(self):
        assert BackgroundColor().of("#000").params == {"color": "#000"}

    def test_parameterless_function_omits_params(self):
        assert Grayscale().to_payload().model_dump(exclude_none=True) == {"name": "grayscale"}

    def test_only_set_keys_are_emitted(self):
        payload = Annotate().text("hello").point_size(12).to_payload().model_dump(exclude_none=True)
        assert payload["params"] == {"text": "hello", "point_size": 12}

    def test_enum_values_are_serialized_as_strings(self):
        function = ResizeToFill().width(100).height(50).gravity(Gravity.NORTH)
        assert function.to_payload().params == {"width": 100, "height": 50, "gravity": "NorthGravity"}

        composite = Composite().src("http://example.com/logo.png").composite_op(CompositeOp.OVER)
        assert composite.to_payload().params["composite_op"] == "OverCompositeOp"

    def test_unsupported_value_names_function_and_param(self):
        function = BackgroundColor().color(object())
        with pytest.raises(SerializationError) as excinfo:
            function.to_payload()
        assert excinfo.value.function_name == "background_color"
        assert excinfo.value.param == "color"
        assert "background_color" in str(excinfo.value)

    def test_nested_values_are_checked(self):
        function = Annotate()._set("extra", {"ok": [1, 2], "bad": {1, 2}})
        with pytest.raises(SerializationError) as excinfo:
            function.to_payload()
        assert excinfo.value.param == "extra.bad"


class TestShorthandFactories:
    """Tests for the Blitline namespace of factory functions."""

    def test_resize_to_fit(self):
        function = Blitline.resize_to_fit(512, 384)
        assert function.name == "resize_to_fit"
        assert function.params == {"width": 512, "height": 384}

    def test_resize_to_fit_width_only(self):
        assert Blitline.resize_to_fit(width=200).params == {"width": 200}

    def test_crop(self):
        assert Blitline.crop(1, 2, 30, 40).params == {"x": 1, "y": 2, "width": 30, "height": 40}

    def test_to_gray_scale(self):
        assert Blitline.to_gray_scale().name == "grayscale"


class TestChaining:
    """Tests for then_apply (parent continuation) and chain (child continuation)."""

    def test_then_apply_returns_parent(self):
        parent = Blitline.resize_to_fit(100, 100)
        child = Blitline.to_gray_scale()
        assert parent.then_apply(child) is parent
        assert parent.functions == [child]

    def test_then_apply_accepts_several_children(self):
        parent = Blitline.no_op()
        first, second = Blitline.to_gray_scale(), Blitline.sepia_tone()
        parent.then_apply(first, second)
        assert parent.functions == [first, second]

    def test_chain_returns_child(self):
        parent = Blitline.resize_to_fit(100, 100)
        child = Blitline.to_gray_scale()
        assert parent.chain(child) is child
        assert parent.functions == [child]

    def test_chain_builds_a_pipeline(self):
        root = Blitline.resize_to_fit(100, 100)
        root.chain(Blitline.to_gray_scale()).chain(Blitline.blur())
        payload = root.to_payload().model_dump(exclude_none=True)
        assert payload["functions"][0]["name"] == "grayscale"
        assert payload["functions"][0]["functions"][0]["name"] == "blur"

    def test_function_cannot_apply_itself(self):
        function = Blitline.no_op()
        with pytest.raises(ConstructionError):
            function.then_apply(function)

    def test_then_apply_rejects_non_functions(self):
        with pytest.raises(ConstructionError):
            Blitline.no_op().then_apply("grayscale")

    def test_nested_saves_and_children(self):
        function = Blitline.resize_to_fit(512, 384).and_save_result_to(
            SavedImage.with_id("abcd1234.color").to_s3("destination-bucket", "dest-color.jpg")
        ).then_apply(
            Blitline.to_gray_scale().and_save_result_to(
                SavedImage.with_id("abcd1234.gray").to_s3("destination-bucket", "dest-gray.jpg")
            )
        )
        payload = function.to_payload().model_dump(exclude_none=True)
        assert payload == {
            "name": "resize_to_fit",
            "params": {"width": 512, "height": 384},
            "save": {
                "image_identifier": "abcd1234.color",
                "s3_destination": {"bucket": "destination-bucket", "key": "dest-color.jpg"},
            },
            "functions": [
                {
                    "name": "grayscale",
                    "save": {
                        "image_identifier": "abcd1234.gray",
                        "s3_destination": {"bucket": "destination-bucket", "key": "dest-gray.jpg"},
                    },
                }
            ],
        }

    def test_multiple_saves_serialize_as_list(self):
        function = Blitline.no_op().and_save_result_to(
            SavedImage.with_id("a").to_s3("bucket", "a.jpg"),
            SavedImage.with_id("b").to_url("https://upload.example.com/b"),
        )
        saves = function.to_payload().model_dump(exclude_none=True)["save"]
        assert saves == [
            {"image_identifier": "a", "s3_destination": {"bucket": "bucket", "key": "a.jpg"}},
            {"image_identifier": "b", "url_destination": {"url": "https://upload.example.com/b"}},
        ]


class TestSavedImage:
    """Tests for SavedImage construction rules."""

    def test_attaching_without_destination_fails(self):
        with pytest.raises(ConstructionError):
            Blitline.no_op().and_save_result_to(SavedImage.with_id("orphan"))

    def test_serializing_without_destination_fails(self):
        with pytest.raises(ConstructionError):
            SavedImage.with_id("orphan").to_payload()

    def test_destination_can_only_be_set_once(self):
        saved = SavedImage.with_id("twice").to_s3("bucket", "key")
        with pytest.raises(ConstructionError):
            saved.to_url("http://example.com/out.jpg")

    def test_empty_identifier_fails(self):
        with pytest.raises(ConstructionError):
            SavedImage.with_id("  ")

    def test_optional_settings_and_headers(self):
        saved = (
            SavedImage.with_id("thumb")
            .to_s3("bucket", "thumb.png")
            .with_s3_header("x-amz-acl", "public-read")
            .as_type("png")
            .with_quality(80)
            .interlaced()
        )
        assert saved.destination == S3Destination("bucket", "thumb.png", (("x-amz-acl", "public-read"),))
        assert saved.to_payload().model_dump(exclude_none=True) == {
            "image_identifier": "thumb",
            "s3_destination": {"bucket": "bucket", "key": "thumb.png", "headers": {"x-amz-acl": "public-read"}},
            "type": "png",
            "quality": 80,
            "interlace": True,
        }

    def test_s3_header_requires_s3_destination(self):
        with pytest.raises(ConstructionError):
            SavedImage.with_id("x").to_url("http://example.com/x").with_s3_header("a", "b")

    def test_azure_destination(self):
        payload = SavedImage.with_id("az").to_azure("account", "sig").to_payload().model_dump(exclude_none=True)
        assert payload["azure_destination"] == {"account_name": "account", "shared_access_signature": "sig"}

    def test_s3_header_replaces_destination(self):
        saved = SavedImage.with_id("h").to_s3("bucket", "h.jpg")
        before = saved.destination
        saved.with_s3_header("Cache-Control", "max-age=60").with_s3_header("Cache-Control", "no-cache")

        assert before.headers == ()
        assert saved.destination.headers == (("Cache-Control", "no-cache"),)
        assert hash(saved.destination) == hash(S3Destination("bucket", "h.jpg", (("Cache-Control", "no-cache"),)))


class TestInvalidInput:
    """Malformed arguments must raise this package's errors, not raw Python ones."""

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_floats_are_rejected(self, value):
        function = Blitline.rotate(value)
        with pytest.raises(SerializationError) as excinfo:
            function.to_payload()
        assert excinfo.value.function_name == "rotate"
        assert excinfo.value.param == "amount"

    def test_non_finite_floats_in_lists_are_rejected(self):
        function = Annotate()._set("points", [1.0, math.nan])
        with pytest.raises(SerializationError):
            function.to_payload()

    def test_cycles_are_rejected(self):
        first, second = Blitline.to_gray_scale(), Blitline.blur()
        first.then_apply(second)
        with pytest.raises(ConstructionError):
            second.then_apply(first)
        assert second.functions == []

    def test_deeper_cycles_are_rejected(self):
        root = Blitline.no_op()
        leaf = root.chain(Blitline.to_gray_scale()).chain(Blitline.blur())
        with pytest.raises(ConstructionError):
            leaf.chain(root)

    def test_base_function_cannot_be_instantiated(self):
        with pytest.raises(ConstructionError):
            Function()

    def test_save_requires_saved_image(self):
        with pytest.raises(ConstructionError):
            Blitline.no_op().and_save_result_to({"image_identifier": "x"})
