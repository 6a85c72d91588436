"""
In-memory book registry backing the API.

The registry owns the ordered book collection and the next-id counter.
One instance is created per application and handed to the route
handlers; nothing else reads or mutates the collection.
"""

import threading
from typing import List, Optional, Union

from api.models import Book, BookInput, BookListQuery, parse_int
from utilities.logger import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS_MESSAGE = "Title and author are required fields."
NOT_FOUND_MESSAGE = "Book not found"


class BookRegistryError(Exception):
    """Base class for errors reported back to API clients."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BookValidationError(BookRegistryError):
    """A required field is missing or empty."""
    status_code = 400

    def __init__(self, message: str = REQUIRED_FIELDS_MESSAGE):
        super().__init__(message)


class BookNotFoundError(BookRegistryError):
    """No book carries the requested id."""
    status_code = 404

    def __init__(self, message: str = NOT_FOUND_MESSAGE):
        super().__init__(message)


class BookRegistry:
    """Ordered, process-resident collection of books."""

    def __init__(self):
        self._books: List[Book] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def count(self) -> int:
        with self._lock:
            return len(self._books)

    def list_books(self, query: Optional[BookListQuery] = None) -> List[Book]:
        """
        List books, optionally filtered by author and paginated.

        Args:
            query: Author substring filter and page/size parameters

        Returns:
            Matching books in insertion order
        """
        query = query or BookListQuery()
        with self._lock:
            books = list(self._books)

        if query.author:
            needle = query.author.lower()
            books = [b for b in books if needle in b.author.lower()]

        pagination = query.pagination()
        if pagination is not None:
            page, size = pagination
            start = (page - 1) * size
            if start < 0 or size < 1:
                return []
            books = books[start:start + size]

        return books

    def get_book(self, book_id: Union[int, str]) -> Book:
        """
        Get a single book by ID.

        Raises:
            BookNotFoundError: if no book has this id
        """
        with self._lock:
            index = self._index_of(book_id)
            if index is None:
                logger.debug("Book lookup missed", book_id=book_id)
                raise BookNotFoundError()
            return self._books[index]

    def create_book(self, payload: BookInput) -> Book:
        """
        Append a new book and assign it the next id.

        Raises:
            BookValidationError: if title or author is missing
        """
        if payload.missing_required_fields():
            raise BookValidationError()

        with self._lock:
            book = Book(
                id=self._next_id,
                title=payload.title,
                author=payload.author,
                published_year=payload.published_year,
            )
            self._next_id += 1
            self._books.append(book)

        logger.info("Book created", book_id=book.id, title=book.title)
        return book

    def update_book(self, book_id: Union[int, str], payload: BookInput) -> Book:
        """
        Replace every field of an existing book except its id.

        Validation happens before the id lookup, so an invalid body for an
        unknown id is reported as a validation error.

        Raises:
            BookValidationError: if title or author is missing
            BookNotFoundError: if no book has this id
        """
        if payload.missing_required_fields():
            raise BookValidationError()

        with self._lock:
            index = self._index_of(book_id)
            if index is None:
                logger.debug("Book update missed", book_id=book_id)
                raise BookNotFoundError()
            book = Book(
                id=self._books[index].id,
                title=payload.title,
                author=payload.author,
                published_year=payload.published_year,
            )
            self._books[index] = book

        logger.info("Book updated", book_id=book.id)
        return book

    def delete_book(self, book_id: Union[int, str]) -> None:
        """
        Remove a book. Its id is never handed out again.

        Raises:
            BookNotFoundError: if no book has this id
        """
        with self._lock:
            index = self._index_of(book_id)
            if index is None:
                logger.debug("Book delete missed", book_id=book_id)
                raise BookNotFoundError()
            removed = self._books.pop(index)

        logger.info("Book deleted", book_id=removed.id)

    def _index_of(self, book_id: Union[int, str]) -> Optional[int]:
        # Caller holds the lock.
        wanted = parse_int(book_id)
        if wanted is None:
            return None
        for index, book in enumerate(self._books):
            if book.id == wanted:
                return index
        return None
