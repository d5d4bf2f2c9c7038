"""Album download packaging."""

import logging
import zipfile
from pathlib import Path

from ..domain.entities import Album
from ..domain.lyrics import TextCodec
from ..domain.value_objects import AudioCodec
from ..exceptions import MissingSourceError
from ..models.config import WorkspaceConfig
from .artwork import ArtworkStore

logger = logging.getLogger(__name__)


def partial_path(destination: Path) -> Path:
    """Sibling path a file is built at before being renamed into place."""
    return destination.with_name(f"{destination.stem}.partial{destination.suffix}")


class AlbumPackager:
    """Bundle an album's tagged songs, lyrics, README and artwork into a ZIP."""

    def __init__(self, config: WorkspaceConfig, artwork: ArtworkStore):
        self.config = config
        self.artwork = artwork

    def package(self, album: Album, codec: AudioCodec) -> bool:
        """Build the album ZIP for a codec.

        Returns:
            False if the archive already existed, True if it was built

        Raises:
            MissingSourceError: If a song artifact or the album artwork is missing
        """
        destination = album.download_path(codec, self.config)
        if destination.exists():
            logger.debug(f"{destination} exists; not zipping {album.format_title()} again")
            return False

        logger.info(f"Zipping {codec.ext} {album.format_title()}")
        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = partial_path(destination)
        width = len(str(len(album.songs)))

        with zipfile.ZipFile(partial, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for index, song in enumerate(album.songs):
                number = f"{index + 1:0{width}d}"
                artifact = song.download_path(codec, self.config)
                if not artifact.exists():
                    raise MissingSourceError(
                        f"Cannot zip {album.format_title()}: {artifact} has not been encoded"
                    )
                folder = "bonus/" if song.bonus else ""
                logger.debug(f"+ {number} {song.format_title()}")
                archive.write(artifact, f"{folder}{number} {song.public_filename}.{codec.ext}")
                if song.lyrics is not None:
                    archive.writestr(
                        f"lyrics/{number} {song.public_filename}.txt",
                        song.lyrics.render(TextCodec.TXT),
                    )
            archive.writestr("README.txt", album.readme_text(self.config))
            archive.write(self.artwork.source_path(album.slug), "artwork.png")

        partial.replace(destination)
        return True
