"""Avatar upload limits."""

from server.settings.components import config

# Mirrors the platform-level ``file_uploads`` switch
AVATAR_UPLOADS_ENABLED = config(
    'AVATAR_UPLOADS_ENABLED',
    cast=bool,
    default=True,
)

# Maximum size in bytes, 0 disables the check
AVATAR_FILESIZE = config('AVATAR_FILESIZE', cast=int, default=6144)

# Pixel bounds, 0 disables the bound
AVATAR_MIN_WIDTH = config('AVATAR_MIN_WIDTH', cast=int, default=20)
AVATAR_MIN_HEIGHT = config('AVATAR_MIN_HEIGHT', cast=int, default=20)
AVATAR_MAX_WIDTH = config('AVATAR_MAX_WIDTH', cast=int, default=90)
AVATAR_MAX_HEIGHT = config('AVATAR_MAX_HEIGHT', cast=int, default=90)

AVATAR_SALT = config('AVATAR_SALT', default='')

AVATAR_ALLOWED_EXTENSIONS = ('gif', 'jpg', 'jpeg', 'png', 'webp')

# Pipe-delimited markers that must not appear in the first 256 bytes
AVATAR_MIME_TRIGGERS = config(
    'AVATAR_MIME_TRIGGERS',
    default='body|head|html|img|plaintext|a href|pre|script|table|title',
)

# Seconds a hook dispatch may take before it counts as a veto
AVATAR_HOOK_TIMEOUT = config('AVATAR_HOOK_TIMEOUT', cast=float, default=5.0)
