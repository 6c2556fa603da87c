"""
Durable key/value storage for the session token and the identity snapshot.

`BrowserStorage` keeps values in a browser cookie (readable server-side on the
next page load through `st.context.cookies`) mirrored into `localStorage`
so the cookie can be recovered if the browser drops it. Writes are performed
by a zero-height HTML component; reads made later in the same script run are
served from `st.session_state`.
"""

import json
import logging
from typing import Dict, Optional
from urllib.parse import unquote

import streamlit as st
import streamlit.components.v1 as components

log = logging.getLogger(__name__)

COOKIE_MAX_AGE = 2592000  # 30 days


class MemoryStorage:
    """Process-local storage; used headless and in tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class BrowserStorage:
    CACHE_KEY = "browser_storage_cache"

    def __init__(self, max_age: int = COOKIE_MAX_AGE):
        self.max_age = max_age

    def _cache(self) -> Dict[str, Optional[str]]:
        if self.CACHE_KEY not in st.session_state:
            st.session_state[self.CACHE_KEY] = {}
        return st.session_state[self.CACHE_KEY]

    def get(self, key: str) -> Optional[str]:
        cache = self._cache()
        if key in cache:
            return cache[key]
        try:
            raw = st.context.cookies.get(key)
        except Exception:
            # No browser context, e.g. bare script execution
            raw = None
        value = unquote(raw) if raw else None
        cache[key] = value
        return value

    def set(self, key: str, value: str) -> None:
        self._cache()[key] = value
        k, v = json.dumps(key), json.dumps(value)
        components.html(
            f"""
            <script>
              var cookieStr = {k} + "=" + encodeURIComponent({v}) + "; path=/; max-age={self.max_age}; SameSite=Lax";
              document.cookie = cookieStr;
              try {{ window.parent.document.cookie = cookieStr; }} catch (e) {{}}
              localStorage.setItem({k}, {v});
            </script>
            """,
            height=0,
        )

    def remove(self, key: str) -> None:
        self._cache()[key] = None
        k = json.dumps(key)
        components.html(
            f"""
            <script>
              var cookieStr = {k} + "=; path=/; max-age=0; SameSite=Lax";
              document.cookie = cookieStr;
              try {{ window.parent.document.cookie = cookieStr; }} catch (e) {{}}
              localStorage.removeItem({k});
            </script>
            """,
            height=0,
        )

    def render_recovery(self, key: str) -> None:
        """Re-creates the cookie from localStorage after the browser dropped it, then reloads once."""
        k = json.dumps(key)
        components.html(
            f"""
            <script>
            (function () {{
              try {{
                const value = localStorage.getItem({k});
                const attempted = sessionStorage.getItem("estate_recovery_attempted");
                const hasCookie = document.cookie.split("; ").some((x) => x.trim().startsWith({k} + "="));
                if (value && !hasCookie && !attempted) {{
                  sessionStorage.setItem("estate_recovery_attempted", "1");
                  const cookieStr = {k} + "=" + encodeURIComponent(value) + "; path=/; max-age={self.max_age}; SameSite=Lax";
                  document.cookie = cookieStr;
                  try {{ window.parent.document.cookie = cookieStr; }} catch (e) {{}}
                  window.location.reload();
                }}
              }} catch (e) {{
                console.error("Session recovery error", e);
              }}
            }})();
            </script>
            """,
            height=0,
        )
