"""
Image-processing functions understood by the Blitline service.

Each concrete class is one operation. Its ``name`` is the identifier the
service expects and its setters write parameters under the service's key
names. Nothing is validated here beyond what is needed to produce JSON; the
service reports bad parameter combinations in its response.

Functions form a tree. Two chaining operations exist and differ only in what
they hand back:

- ``then_apply(*children)`` returns the parent, so further calls keep
  configuring the parent (more children, more saves).
- ``chain(child)`` returns the child, so further calls configure the child.

Example:
    Blitline.resize_to_fit(512, 384).and_save_result_to(
        SavedImage.with_id("abcd1234.color").to_s3("dest-bucket", "dest-color.jpg")
    ).then_apply(
        Blitline.to_gray_scale().and_save_result_to(
            SavedImage.with_id("abcd1234.gray").to_s3("dest-bucket", "dest-gray.jpg")
        )
    )
"""

from __future__ import annotations

import copy
import math
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, TypeVar

from .exceptions import ConstructionError, SerializationError
from .models import FunctionPayload
from .saved_image import SavedImage

F = TypeVar("F", bound="Function")


class Gravity(str, Enum):
    NORTH_WEST = "NorthWestGravity"
    NORTH = "NorthGravity"
    NORTH_EAST = "NorthEastGravity"
    WEST = "WestGravity"
    CENTER = "CenterGravity"
    EAST = "EastGravity"
    SOUTH_WEST = "SouthWestGravity"
    SOUTH = "SouthGravity"
    SOUTH_EAST = "SouthEastGravity"


class CompositeOp(str, Enum):
    OVER = "OverCompositeOp"
    MULTIPLY = "MultiplyCompositeOp"
    SCREEN = "ScreenCompositeOp"
    OVERLAY = "OverlayCompositeOp"
    DST_IN = "DstInCompositeOp"
    COPY_OPACITY = "CopyOpacityCompositeOp"


def _to_wire_value(function_name: str, param: str, value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        raise SerializationError(function_name, param, value)
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Enum):
        return _to_wire_value(function_name, param, value.value)
    if isinstance(value, (list, tuple)):
        return [_to_wire_value(function_name, param, item) for item in value]
    if isinstance(value, dict):
        wire: Dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise SerializationError(function_name, f"{param}.{key!r}", key)
            wire[key] = _to_wire_value(function_name, f"{param}.{key}", item)
        return wire
    raise SerializationError(function_name, param, value)


class Function:
    """Base class for one named transformation step."""

    name: ClassVar[str]

    def __init__(self) -> None:
        if not getattr(type(self), "name", None):
            raise ConstructionError(f"{type(self).__name__} does not name a Blitline function")
        self.params: Dict[str, Any] = {}
        self.functions: List[Function] = []
        self.saved_images: List[SavedImage] = []

    def _set(self: F, key: str, value: Any) -> F:
        self.params[key] = value
        return self

    def and_save_result_to(self: F, *saved_images: SavedImage) -> F:
        if not saved_images:
            raise ConstructionError("and_save_result_to() needs at least one saved image")
        for saved in saved_images:
            if not isinstance(saved, SavedImage):
                raise ConstructionError(f"Expected a SavedImage, got {type(saved).__name__}")
            self.saved_images.append(saved.ensure_destination())
        return self

    def then_apply(self: F, *children: Function) -> F:
        """Append children that run on this function's output; returns this function."""
        if not children:
            raise ConstructionError("then_apply() needs at least one function")
        for child in children:
            self._add_child(child)
        return self

    def chain(self, child: F) -> F:
        """Append one child that runs on this function's output; returns the child."""
        self._add_child(child)
        return child

    def _add_child(self, child: Function) -> None:
        if not isinstance(child, Function):
            raise ConstructionError(f"Expected a Function, got {type(child).__name__}")
        if child._contains(self):
            raise ConstructionError(f"Function '{self.name}' cannot be applied to its own output")
        self.functions.append(child)

    def _contains(self, target: Function) -> bool:
        pending = [self]
        while pending:
            node = pending.pop()
            if node is target:
                return True
            pending.extend(node.functions)
        return False

    def copy(self: F) -> F:
        return copy.deepcopy(self)

    def iter_saved_images(self):
        yield from self.saved_images
        for child in self.functions:
            yield from child.iter_saved_images()

    def to_payload(self) -> FunctionPayload:
        params = {key: _to_wire_value(self.name, key, value) for key, value in self.params.items()}
        saves = [saved.to_payload() for saved in self.saved_images]
        return FunctionPayload(
            name=self.name,
            params=params or None,
            save=(saves[0] if len(saves) == 1 else saves) or None,
            functions=[child.to_payload() for child in self.functions] or None,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(params={self.params!r}, functions={len(self.functions)}, saves={len(self.saved_images)})"


class Resize(Function):
    name = "resize"

    def width(self, width: int) -> Resize:
        return self._set("width", width)

    def height(self, height: int) -> Resize:
        return self._set("height", height)


class ResizeToFit(Function):
    name = "resize_to_fit"

    def width(self, width: int) -> ResizeToFit:
        return self._set("width", width)

    def height(self, height: int) -> ResizeToFit:
        return self._set("height", height)

    def only_shrink_larger(self, only_shrink_larger: bool = True) -> ResizeToFit:
        return self._set("only_shrink_larger", only_shrink_larger)


class ResizeToFill(Function):
    name = "resize_to_fill"

    def width(self, width: int) -> ResizeToFill:
        return self._set("width", width)

    def height(self, height: int) -> ResizeToFill:
        return self._set("height", height)

    def gravity(self, gravity: Gravity) -> ResizeToFill:
        return self._set("gravity", gravity)

    def only_shrink_larger(self, only_shrink_larger: bool = True) -> ResizeToFill:
        return self._set("only_shrink_larger", only_shrink_larger)


class Scale(Function):
    name = "scale"

    def scale_factor(self, factor: float) -> Scale:
        return self._set("scale_factor", factor)


class Crop(Function):
    name = "crop"

    def x(self, x: int) -> Crop:
        return self._set("x", x)

    def y(self, y: int) -> Crop:
        return self._set("y", y)

    def width(self, width: int) -> Crop:
        return self._set("width", width)

    def height(self, height: int) -> Crop:
        return self._set("height", height)


class CropToSquare(Function):
    name = "crop_to_square"

    def gravity(self, gravity: Gravity) -> CropToSquare:
        return self._set("gravity", gravity)


class Rotate(Function):
    name = "rotate"

    def amount(self, degrees: float) -> Rotate:
        return self._set("amount", degrees)


class Grayscale(Function):
    name = "grayscale"


class SepiaTone(Function):
    name = "sepia_tone"

    def threshold(self, threshold: float) -> SepiaTone:
        return self._set("threshold", threshold)


class Blur(Function):
    name = "blur"

    def radius(self, radius: float) -> Blur:
        return self._set("radius", radius)

    def sigma(self, sigma: float) -> Blur:
        return self._set("sigma", sigma)


class Sharpen(Function):
    name = "sharpen"

    def radius(self, radius: float) -> Sharpen:
        return self._set("radius", radius)

    def sigma(self, sigma: float) -> Sharpen:
        return self._set("sigma", sigma)


class UnsharpMask(Function):
    name = "unsharp_mask"

    def radius(self, radius: float) -> UnsharpMask:
        return self._set("radius", radius)

    def sigma(self, sigma: float) -> UnsharpMask:
        return self._set("sigma", sigma)

    def amount(self, amount: float) -> UnsharpMask:
        return self._set("amount", amount)

    def threshold(self, threshold: float) -> UnsharpMask:
        return self._set("threshold", threshold)


class BackgroundColor(Function):
    name = "background_color"

    def color(self, color: str) -> BackgroundColor:
        return self._set("color", color)

    def of(self, color: str) -> BackgroundColor:
        return self.color(color)


class Pad(Function):
    name = "pad"

    def size(self, size: int) -> Pad:
        return self._set("size", size)

    def color(self, color: str) -> Pad:
        return self._set("color", color)

    def gravity(self, gravity: Gravity) -> Pad:
        return self._set("gravity", gravity)


class Annotate(Function):
    name = "annotate"

    def text(self, text: str) -> Annotate:
        return self._set("text", text)

    def x(self, x: int) -> Annotate:
        return self._set("x", x)

    def y(self, y: int) -> Annotate:
        return self._set("y", y)

    def color(self, color: str) -> Annotate:
        return self._set("color", color)

    def font_family(self, font_family: str) -> Annotate:
        return self._set("font_family", font_family)

    def point_size(self, point_size: int) -> Annotate:
        return self._set("point_size", point_size)

    def stroke(self, stroke: str) -> Annotate:
        return self._set("stroke", stroke)

    def gravity(self, gravity: Gravity) -> Annotate:
        return self._set("gravity", gravity)


class Watermark(Function):
    name = "watermark"

    def text(self, text: str) -> Watermark:
        return self._set("text", text)

    def gravity(self, gravity: Gravity) -> Watermark:
        return self._set("gravity", gravity)

    def point_size(self, point_size: int) -> Watermark:
        return self._set("point_size", point_size)

    def font_family(self, font_family: str) -> Watermark:
        return self._set("font_family", font_family)

    def opacity(self, opacity: float) -> Watermark:
        return self._set("opacity", opacity)


class Composite(Function):
    """Overlay another image (``src``) onto the current one."""

    name = "composite"

    def src(self, src: str) -> Composite:
        return self._set("src", src)

    def as_mask(self, as_mask: bool = True) -> Composite:
        return self._set("as_mask", as_mask)

    def x(self, x: int) -> Composite:
        return self._set("x", x)

    def y(self, y: int) -> Composite:
        return self._set("y", y)

    def gravity(self, gravity: Gravity) -> Composite:
        return self._set("gravity", gravity)

    def composite_op(self, op: CompositeOp) -> Composite:
        return self._set("composite_op", op)

    def scale_to_match(self, scale_to_match: bool = True) -> Composite:
        return self._set("scale_to_match", scale_to_match)


class Modulate(Function):
    name = "modulate"

    def brightness(self, brightness: float) -> Modulate:
        return self._set("brightness", brightness)

    def saturation(self, saturation: float) -> Modulate:
        return self._set("saturation", saturation)

    def hue(self, hue: float) -> Modulate:
        return self._set("hue", hue)


class Contrast(Function):
    name = "contrast"

    def sharpen(self, sharpen: bool = True) -> Contrast:
        return self._set("sharpen", sharpen)


class Normalize(Function):
    name = "normalize"


class AutoEnhance(Function):
    name = "auto_enhance"


class AutoLevel(Function):
    name = "auto_level"


class AutoGamma(Function):
    name = "auto_gamma"


class Trim(Function):
    name = "trim"


class Flip(Function):
    name = "flip"


class Flop(Function):
    name = "flop"


class Vignette(Function):
    name = "vignette"

    def color(self, color: str) -> Vignette:
        return self._set("color", color)

    def x(self, x: int) -> Vignette:
        return self._set("x", x)

    def y(self, y: int) -> Vignette:
        return self._set("y", y)

    def threshold(self, threshold: float) -> Vignette:
        return self._set("threshold", threshold)


class Density(Function):
    name = "density"

    def dpi(self, dpi: int) -> Density:
        return self._set("dpi", dpi)


class Deskew(Function):
    name = "deskew"

    def threshold(self, threshold: float) -> Deskew:
        return self._set("threshold", threshold)


class NoOp(Function):
    """Passes the source through unchanged; useful to save a copy of the original."""

    name = "no_op"


class Blitline:
    """Shorthand constructors for the common functions."""

    @staticmethod
    def resize(width: int, height: int) -> Resize:
        return Resize().width(width).height(height)

    @staticmethod
    def resize_to_fit(width: Optional[int] = None, height: Optional[int] = None) -> ResizeToFit:
        function = ResizeToFit()
        if width is not None:
            function.width(width)
        if height is not None:
            function.height(height)
        return function

    @staticmethod
    def resize_to_fill(width: int, height: int) -> ResizeToFill:
        return ResizeToFill().width(width).height(height)

    @staticmethod
    def scale(factor: float) -> Scale:
        return Scale().scale_factor(factor)

    @staticmethod
    def crop(x: int, y: int, width: int, height: int) -> Crop:
        return Crop().x(x).y(y).width(width).height(height)

    @staticmethod
    def crop_to_square() -> CropToSquare:
        return CropToSquare()

    @staticmethod
    def rotate(degrees: float) -> Rotate:
        return Rotate().amount(degrees)

    @staticmethod
    def to_gray_scale() -> Grayscale:
        return Grayscale()

    @staticmethod
    def sepia_tone() -> SepiaTone:
        return SepiaTone()

    @staticmethod
    def blur() -> Blur:
        return Blur()

    @staticmethod
    def sharpen() -> Sharpen:
        return Sharpen()

    @staticmethod
    def background_color(color: str) -> BackgroundColor:
        return BackgroundColor().color(color)

    @staticmethod
    def annotate(text: str) -> Annotate:
        return Annotate().text(text)

    @staticmethod
    def watermark(text: str) -> Watermark:
        return Watermark().text(text)

    @staticmethod
    def composite(src: str) -> Composite:
        return Composite().src(src)

    @staticmethod
    def no_op() -> NoOp:
        return NoOp()
