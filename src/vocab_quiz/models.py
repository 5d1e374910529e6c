from pydantic import BaseModel


class WordItem(BaseModel):
    id: int
    word: str
    gloss: str = ""
    audio: str = ""
    book_id: str = ""
    is_learned: bool = False
    is_favorite: bool = False
    is_wrong: bool = False
    wrong_count: int = 0


class BookInfo(BaseModel):
    book_id: str
    name: str = ""
    category: str = ""
    version: int = 1
    word_count: int = 0


class BookFile(BaseModel):
    """On-disk layout of one downloaded word book."""

    book: BookInfo
    words: list[WordItem]
