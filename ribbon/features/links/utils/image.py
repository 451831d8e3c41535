import io

from PIL import Image, ImageOps, UnidentifiedImageError

from ribbon.platform.exceptions import UploadError


def square_icon(data: bytes, size: int = 400, quality: int = 90) -> bytes:
    """
    Crop the largest centred square out of an image and re-encode it as a
    `size` x `size` JPEG.

    Raises:
        UploadError: if the bytes cannot be decoded or encoded, or the image
            has more pixels than Pillow will open
    """
    try:
        with Image.open(io.BytesIO(data)) as im:
            im = ImageOps.exif_transpose(im)
            side = min(im.width, im.height)
            left = (im.width - side) // 2
            top = (im.height - side) // 2
            im = im.crop((left, top, left + side, top + side))
            im = im.resize((size, size), Image.LANCZOS)

            if im.mode == "RGBA":
                bg = Image.new("RGB", im.size, (255, 255, 255))
                bg.paste(im, mask=im.split()[3])
                im = bg
            elif im.mode != "RGB":
                im = im.convert("RGB")

            out = io.BytesIO()
            im.save(out, "JPEG", quality=quality, optimize=True)
            return out.getvalue()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise UploadError("Failed to load image") from exc
