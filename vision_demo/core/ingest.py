from vision_demo.core.errors import InvalidInputError
from vision_demo.core.types import ImageRef


def load_image_ref(file_name: str | None, content: bytes, mime_type: str | None, max_bytes: int) -> ImageRef:
    if not (mime_type or '').startswith('image/'):
        raise InvalidInputError(
            'INVALID_IMAGE_TYPE',
            'Please select a valid image file.',
            details={'mime_type': mime_type},
        )
    if not content:
        raise InvalidInputError('MISSING_IMAGE', 'Missing image upload (field name: image).')
    if len(content) > max_bytes:
        raise InvalidInputError('IMAGE_TOO_LARGE', f'Image too large. Max {max_bytes} bytes.')

    return ImageRef(
        content=content,
        file_name=file_name or 'upload',
        byte_size=len(content),
        mime_type=mime_type,
    )
