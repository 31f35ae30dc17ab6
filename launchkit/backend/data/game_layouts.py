"""
Directory layouts of the supported titles.
"""

from ..models.configuration import PathLayout

ANIME_GAME_LAYOUT = PathLayout(
    folder_name="anime-game-launcher",
    editions={
        "global": "Anime Game",
        "china": "Anime Game CN",
    },
)

HONKERS_LAYOUT = PathLayout(
    folder_name="honkers-launcher",
    editions={
        "global": "Honkers",
    },
)

HONKERS_RAILWAY_LAYOUT = PathLayout(
    folder_name="honkers-railway-launcher",
    editions={
        "global": "Honkers Railway",
        "china": "Honkers Railway CN",
    },
)

LAYOUTS = {
    layout.folder_name: layout
    for layout in (ANIME_GAME_LAYOUT, HONKERS_LAYOUT, HONKERS_RAILWAY_LAYOUT)
}
