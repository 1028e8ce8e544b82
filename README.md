# supplydesk

Building blocks for the back end of a warehouse mobile app. The app's users
are suppliers, customers, warehouse staff ("werka") and admins. The data they
work with lives in an ERP.

## What is in the package

- **Configuration.** `supplydesk.config.load_from_env(env_file=".env")` loads
  the given dotenv file, if it exists, without overriding variables that are
  already set. It then returns a frozen `Config` built from the process
  environment. `ERP_TIMEOUT_SECONDS` must be a positive integer and defaults
  to 15 seconds. `WERKA_TELEGRAM_ID` must be a 64-bit integer. If either holds
  a value that is not valid, `ConfigError` (a `ValueError`) is raised.
- **`.env` persistence.** `supplydesk.env_persister.DotEnvPersister(path)`
  defaults to `.env` when the path is blank. Its `upsert(values)` method reads
  the existing file, sets the given keys, and rewrites the whole file with the
  keys in sorted order. Keys and values are trimmed, and blank keys are
  skipped. Integer values are written bare and all other values are
  double-quoted.
- **Profile preferences.** `supplydesk.profile_store.ProfileStore` keeps one
  `ProfilePrefs` (nickname, avatar URL) for each key, all in a single JSON
  file. `get` returns empty preferences for a key that has none stored.
- **Push tokens.** `supplydesk.push_token_store.PushTokenStore` keeps lists of
  `PushTokenRecord` (token, platform, UTC `updated_at`) for each owner key.
  - `put` registers a token, replacing any earlier record of the same token
    under that key.
  - `delete` removes a token and drops the key when its list becomes empty.
  - `move_token_to_key` removes the token from every key, then registers it
    under the target key. Other tokens already under the target key stay.
  - `list` returns a copy of the records for a key.
- **Admin supplier state.** `supplydesk.admin_supplier_store.AdminSupplierStore`
  keeps one `AdminSupplierState` for each supplier or customer reference. A
  state holds:
  - the blocked and removed flags;
  - a custom access code;
  - the assigned item codes;
  - the pending code persistence;
  - the fields of the code-regeneration window.

  `is_code_locked(now)` and `retry_after_seconds(now)` report the cooldown.
  `to_dict` and `from_dict` convert a state to and from its JSON form. A time
  that is not set is represented by `supplydesk.push_token_store.ZERO_TIME`.
- **Access codes.** `supplydesk.supplier_codes.random_supplier_code(prefix, existing)`
  returns the prefix followed by ten characters from
  `ABCDEFGHJKLMNPQRSTUVWXYZ23456789`. A blank prefix becomes `"10"`. The code
  is never one that is already in `existing`. After 64 attempts that all
  collide it raises `CodeGenerationError`.
  `bump_code_regen_state(state, now)` counts one regeneration and works in
  one-minute windows:
  - the third regeneration within a window starts a cooldown that lasts until
    the window ends;
  - a call made while the cooldown runs raises `CodeRegenCooldownError`.

  The module also defines `AdminSupplierNotFoundError`.
- **Text helpers.** `supplydesk.supplier_text` provides:
  - `upsert_supplier_phone_in_details` puts a `Telefon:` line first in the ERP
    details text;
  - `upsert_accord_code_in_details` puts an `Accord Code:` line last;
  - `normalize_item_codes` trims the codes, drops blanks and removes
    duplicates;
  - `filter_items_by_query` keeps the items whose code or name contains the
    query, ignoring case;
  - `is_item_supplier_permission_error` recognises ERP permission denials;
  - `state_includes_item` checks whether an item code is assigned to a state.

Every store writes its file atomically: it writes a temporary file in the same
directory and then renames it over the target. Each store keeps an in-memory
copy of its data after the first read, and guards access with a lock.

## What the package does not do

There is no HTTP server, no ERP client and no command-line program here. The
stores and helpers are meant to be used by such a service, but the package
neither talks to an ERP nor serves the mobile app.

## Installation

```
pip install .
```

## Example

```python
from supplydesk.env_persister import DotEnvPersister
from supplydesk.push_token_store import PushTokenStore
from supplydesk.supplier_text import upsert_accord_code_in_details

DotEnvPersister(".env").upsert({"ERP_API_KEY": "placeholder"})

tokens = PushTokenStore("data/push_tokens.json")
tokens.put("supplier:SUP-001", "device-a", "android")
tokens.move_token_to_key("werka:werka", "device-a", "android")
print([record.token for record in tokens.list("werka:werka")])
# ['device-a']

print(upsert_accord_code_in_details("Accord Code: OLD\nNote", "10ABCDEFGHJK"))
# Note
# Accord Code: 10ABCDEFGHJK
```

## Running the tests

```
pip install ".[test]"
pytest
```