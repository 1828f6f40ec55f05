# bazar/services/firebase.py
from __future__ import annotations

import os
from functools import lru_cache

import firebase_admin
from firebase_admin import credentials, storage

from ..settings import settings


@lru_cache
def ensure_bucket():
    """
    Return the Cloud Storage bucket holding product images, initializing the
    Firebase app exactly once.

    - Safe to call many times (and from many threads).
    - Uses GOOGLE_APPLICATION_CREDENTIALS if present, or ADC otherwise.
    - Needs FIREBASE_STORAGE_BUCKET (e.g. "lih-bazar.appspot.com").
    """

    if not firebase_admin._apps:
        options = {"projectId": settings.firebase_project_id}
        if settings.firebase_storage_bucket:
            options["storageBucket"] = settings.firebase_storage_bucket
        sa_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
        try:
            if sa_path and os.path.isfile(sa_path):
                cred = credentials.Certificate(sa_path)
                firebase_admin.initialize_app(cred, options)
            else:
                firebase_admin.initialize_app(options=options)
        except ValueError:
            # If another request initialized between our check and this call,
            # just ignore the "app already exists" error and continue.
            pass

    return storage.bucket()
