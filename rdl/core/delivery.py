from pathlib import Path
from rdl.common.logger import log
from rdl.core.errors import DeliveryFailed

# Hands a finished report over as a file in `directory`. Anything the filesystem throws comes back as DeliveryFailed
# with the OSError chained, so the caller only has one thing to catch.
class FileDelivery:

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def __call__(self, file_name, mime_type, payload: bytes):
        return self.deliver(file_name, mime_type, payload)

    def deliver(self, file_name, mime_type, payload: bytes):
        target_path = self.directory / file_name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(target_path, "wb") as f:
                f.write(payload)
        except OSError as e:
            log.error(f"Failed to write report '{file_name}' ({mime_type}) to '{self.directory}'", exc_info=True)
            raise DeliveryFailed(file_name, e) from e
        log.info(f"Wrote report ({len(payload)} bytes, {mime_type}) to '{target_path}'")
        return target_path
