import copy

import streamlit as st


PREFIX = "slice"


def _store(store=None):
    return st.session_state if store is None else store


def slice_key(slice_name):
    return f"{PREFIX}.{slice_name}"


def is_loaded(slice_name, store=None):
    return slice_key(slice_name) in _store(store)


def get_items(slice_name, store=None):
    return list(_store(store).get(slice_key(slice_name)) or [])


def set_items(slice_name, items, store=None):
    _store(store)[slice_key(slice_name)] = list(items)


def snapshot_items(slice_name, store=None):
    return copy.deepcopy(get_items(slice_name, store))


def find_item(slice_name, item_id, store=None):
    for item in get_items(slice_name, store):
        if item.get("id") == item_id:
            return item
    return None


def clear_slice(slice_name, store=None):
    target = _store(store)
    key = slice_key(slice_name)
    if key in target:
        del target[key]


def clear_all(store=None):
    target = _store(store)
    for key in [key for key in list(target.keys()) if str(key).startswith(f"{PREFIX}.")]:
        del target[key]
