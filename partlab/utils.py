import os


def ensure_dir(path):
    os.makedirs(path, exist_ok=True)


def slugify_name(name):
    return (name or "").lower().replace(" ", "-")
