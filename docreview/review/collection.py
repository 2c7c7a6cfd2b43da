"""
Collection Index

The authoritative, ordered working set of documents, and the filtered view
and selection the reviewer navigates.
"""

from __future__ import annotations

from typing import Optional, List, Dict, Any, Callable, Iterable, Iterator, Tuple, TypeVar, Union

from loguru import logger

from ..intake import SourceFile
from ..notices import Notice, NoticeKind, info
from .review_data import DocumentData, DocStatus, DocType

T = TypeVar('T')

ALL = 'all'
TypeFilter = Union[DocType, str]

# Display precedence for grouped views
GROUP_ORDER = [DocType.INVOICE, DocType.BOL, DocType.RECEIPT, DocType.UNKNOWN]


def filter_by_type(docs: Iterable[DocumentData], type_filter: TypeFilter = ALL) -> List[DocumentData]:
    """Documents matching a type filter ('all' or a DocType), in arrival order."""
    if type_filter == ALL:
        return list(docs)
    return [d for d in docs if d.doc_type == type_filter]


def group_by_type(docs: Iterable[DocumentData]) -> Dict[DocType, List[DocumentData]]:
    """Group documents by type in display order, omitting empty groups."""
    docs = list(docs)
    groups = {}
    for doc_type in GROUP_ORDER:
        members = [d for d in docs if d.doc_type == doc_type]
        if members:
            groups[doc_type] = members
    return groups


def available_types(docs: Iterable[DocumentData]) -> List[DocType]:
    """Classified types present in the data, UNKNOWN excluded."""
    present = {d.doc_type for d in docs if d.doc_type != DocType.UNKNOWN}
    return sorted(present, key=lambda t: t.value)


def counts_by_type(docs: Iterable[DocumentData]) -> Dict[str, int]:
    """
    Count documents per filter option.

    Returns:
        {'all': total, 'BOL': n, 'INVOICE': n, ...} for each type present
    """
    docs = list(docs)
    counts = {ALL: len(docs)}
    for doc_type in available_types(docs):
        counts[doc_type.value] = sum(1 for d in docs if d.doc_type == doc_type)
    return counts


class DocumentCollection:
    """
    Owned, versioned sequence of documents.

    All mutations go through `insert_placeholders`, `replace` or `update`;
    each bumps `version`. Lookups and replacements are keyed by document id,
    never by position.

    Usage:
        collection = DocumentCollection()
        placeholders = collection.insert_placeholders(sources)
        collection.update(doc_id, lambda doc: doc.extracted_fields.append(field))
    """

    def __init__(self, documents: Optional[Iterable[DocumentData]] = None):
        self._documents: List[DocumentData] = list(documents or [])
        self.version = 0

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[DocumentData]:
        return iter(list(self._documents))

    def __contains__(self, doc_id: str) -> bool:
        return self.get(doc_id) is not None

    @property
    def documents(self) -> Tuple[DocumentData, ...]:
        return tuple(self._documents)

    def get(self, doc_id: Optional[str]) -> Optional[DocumentData]:
        if doc_id is None:
            return None
        for doc in self._documents:
            if doc.id == doc_id:
                return doc
        return None

    def _bump(self) -> None:
        self.version += 1

    def insert_placeholders(self, sources: Iterable[SourceFile]) -> List[DocumentData]:
        """Append a PROCESSING placeholder per file; ids are allocated here."""
        placeholders = [DocumentData.placeholder(s) for s in sources]
        if placeholders:
            self._documents.extend(placeholders)
            self._bump()
            logger.info(f"Queued {len(placeholders)} document(s) for extraction")
        return placeholders

    def add(self, document: DocumentData) -> None:
        """Append an existing document, e.g. when restoring a session."""
        if self.get(document.id) is not None:
            raise ValueError(f"Document '{document.id}' already in collection")
        self._documents.append(document)
        self._bump()

    def replace(self, doc_id: str, document: DocumentData) -> bool:
        """
        Swap in a new record for a document, keeping its id and position.

        Returns:
            False if no document has that id
        """
        for index, doc in enumerate(self._documents):
            if doc.id == doc_id:
                document.id = doc_id
                self._documents[index] = document
                self._bump()
                return True
        return False

    def update(self, doc_id: str, mutate: Callable[[DocumentData], T]) -> Optional[T]:
        """
        Apply a mutation to one document.

        Returns:
            Whatever `mutate` returns, or None if the document is missing
        """
        doc = self.get(doc_id)
        if doc is None:
            return None
        result = mutate(doc)
        self._bump()
        return result

    def update_many(
        self,
        predicate: Callable[[DocumentData], bool],
        mutate: Callable[[DocumentData], Any],
    ) -> int:
        """
        Apply a mutation to every matching document in one pass.

        Returns:
            Number of documents mutated
        """
        matched = [d for d in self._documents if predicate(d)]
        for doc in matched:
            mutate(doc)
        if matched:
            self._bump()
        return len(matched)

    def with_status(self, *statuses: DocStatus) -> List[DocumentData]:
        return [d for d in self._documents if d.status in statuses]

    def get_statistics(self) -> Dict[str, Any]:
        """Status breakdown and processing progress."""
        total = len(self._documents)
        processed = sum(1 for d in self._documents if d.status != DocStatus.PROCESSING)
        by_status = {
            status.value: sum(1 for d in self._documents if d.status == status)
            for status in DocStatus
        }
        return {
            'total': total,
            'processed': processed,
            'pending': total - processed,
            'progress': round(processed / total * 100, 1) if total else 0.0,
            'by_status': by_status,
            'version': self.version,
        }


class ReviewQueue:
    """
    The filtered view over a collection and the reviewer's selection.

    The selection rule holds whenever the selection is read: a selected id
    outside the filtered view falls to the view's first document (or None),
    and an empty selection picks the first document when there is one.
    """

    def __init__(self, collection: DocumentCollection, type_filter: TypeFilter = ALL):
        self.collection = collection
        self.type_filter = type_filter
        self._selected_id: Optional[str] = None

    def filtered(self) -> List[DocumentData]:
        return filter_by_type(self.collection, self.type_filter)

    def resolve_selection(self) -> Optional[str]:
        view = self.filtered()
        ids = [d.id for d in view]
        if self._selected_id not in ids:
            self._selected_id = ids[0] if ids else None
        return self._selected_id

    @property
    def selected_id(self) -> Optional[str]:
        return self.resolve_selection()

    @property
    def selected_document(self) -> Optional[DocumentData]:
        return self.collection.get(self.selected_id)

    def set_filter(self, type_filter: TypeFilter) -> Optional[str]:
        """Switch the type filter and return the resulting selection."""
        if type_filter != ALL and not isinstance(type_filter, DocType):
            type_filter = DocType.parse(type_filter)
        self.type_filter = type_filter
        return self.resolve_selection()

    def select(self, doc_id: str) -> Optional[str]:
        """Select a document; ids outside the view fall back per the selection rule."""
        self._selected_id = doc_id
        return self.resolve_selection()

    def next(self, current_id: Optional[str] = None) -> Tuple[Optional[str], Optional[Notice]]:
        """
        Advance to the next document in the filtered view.

        Args:
            current_id: Position to advance from, defaults to the selection

        Returns:
            (selected id, None) after moving, or (unchanged id, END_OF_LIST
            notice) at the end of the view; the view does not wrap
        """
        view = [d.id for d in self.filtered()]
        current = current_id if current_id is not None else self.selected_id

        if current in view:
            index = view.index(current)
            if index < len(view) - 1:
                self._selected_id = view[index + 1]
                return self._selected_id, None
        elif view:
            return self.selected_id, None

        return self.selected_id, info(
            NoticeKind.END_OF_LIST,
            "You've reached the end of the filtered documents.",
        )
