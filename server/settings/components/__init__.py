"""Shared helpers for settings components."""

from pathlib import Path

from decouple import AutoConfig

# Build paths inside the project like this: BASE_DIR / 'subdir'
BASE_DIR = Path(__file__).parent.parent.parent.parent

# Loading `.env` files, see `config/.env.template`
config = AutoConfig(search_path=BASE_DIR.joinpath('config'))
