import logging
import mimetypes
import os
import time
import uuid
from typing import BinaryIO

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class BlobTooLargeError(Exception):
    pass


class BlobStore:
    """
    업로드 파일 원본을 로컬 디렉터리에 저장하는 저장소
    저장 파일명: <field>-<epoch ms>-<random><확장자>
    """

    def __init__(self, root: str, max_size: int):
        self.root = root
        self.max_size = max_size
        os.makedirs(self.root, exist_ok=True)

    @staticmethod
    def generate_name(field_name: str, original_name: str) -> str:
        extension = get_extension(original_name)
        return f"{field_name}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{extension}"

    def path_for(self, file_name: str) -> str:
        # 저장 파일명은 서버에서 생성하지만, 디렉터리 밖을 가리키지 않도록 basename만 사용
        return os.path.join(self.root, os.path.basename(file_name))

    def exists(self, file_name: str) -> bool:
        return os.path.isfile(self.path_for(file_name))

    def save(self, stream: BinaryIO, file_name: str) -> int:
        """
        stream을 file_name으로 저장하고 저장된 바이트 수를 반환
        max_size를 넘으면 쓰던 파일을 지우고 BlobTooLargeError
        """
        size = 0
        with open(self.path_for(file_name), "xb") as out:
            try:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_size:
                        raise BlobTooLargeError(file_name)
                    out.write(chunk)
            except Exception:
                out.close()
                self.discard(file_name)
                raise
        return size

    def delete(self, file_name: str) -> None:
        """ 파일이 없으면 FileNotFoundError 그대로 전파 """
        os.remove(self.path_for(file_name))

    def discard(self, file_name: str) -> None:
        """ 보상 처리용 삭제: 실패해도 예외를 올리지 않고 로그만 남김 """
        try:
            os.remove(self.path_for(file_name))
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception(f"Failed to remove blob: {file_name}")


def get_extension(original_name: str) -> str:
    return os.path.splitext(original_name or "")[1].lower()


def guess_mime_type(original_name: str, content_type: str | None) -> str:
    if content_type:
        return content_type
    guessed, _ = mimetypes.guess_type(original_name or "")
    return guessed or "application/octet-stream"
