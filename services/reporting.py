from __future__ import annotations

from typing import Iterable, Optional, Set

from models import Profile


def format_profile_line(profile: Profile, followed: bool = False, mine: bool = False) -> str:
    marks = ""
    if mine:
        marks += " [me]"
    if followed:
        marks += " [following]"
    tags = " ".join(profile.tags)
    return f"{profile.id}  {profile.name} | {profile.role} | {profile.area} | {profile.location}{marks}\n    {tags}"


def print_profiles(profiles: Iterable[Profile], followed: Optional[Set[str]] = None, me: Optional[Profile] = None) -> None:
    """Print the directory listing, newest first as given."""
    followed = followed or set()
    rows = list(profiles)
    print("\n" + "=" * 60)
    print(f"CONNECTAI DIRECTORY - {len(rows)} profile(s)")
    print("=" * 60)
    for profile in rows:
        print(format_profile_line(profile, followed=profile.id in followed, mine=bool(me and me.id == profile.id)))
    print("=" * 60)
