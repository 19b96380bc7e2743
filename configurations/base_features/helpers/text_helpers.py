def slugify(text):
    return text.lower().replace(" ", "_")


def snake_to_title(text):
    all_capitals = ['id', 'po', 'wo']
    return ' '.join(word.capitalize() if word not in all_capitals else word.upper() for word in text.split('_'))


def performer_name(performer, default="system"):
    """Username recorded in *_by audit columns for a user object, a plain string or None."""
    if performer is None:
        return default
    if isinstance(performer, str):
        return performer or default
    return getattr(performer, "username", None) or default
