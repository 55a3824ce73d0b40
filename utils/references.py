from typing import Iterable, List


async def populate(docs: List[dict], field: str, collection, fields: Iterable[str]) -> List[dict]:
    """
    Replace the id stored under `field` with a small summary of the referenced
    document (its `id` plus `fields`). Dangling references become None.
    """
    ids = list({d[field] for d in docs if d.get(field)})
    summaries = {}
    if ids:
        refs = await collection.find({"id": {"$in": ids}}).to_list(len(ids))
        wanted = ("id", *fields)
        summaries = {ref["id"]: {k: ref.get(k) for k in wanted} for ref in refs}

    for doc in docs:
        doc[field] = summaries.get(doc.get(field))
    return docs
