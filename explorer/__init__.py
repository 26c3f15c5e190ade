"""
Secure file explorer: browse, download and upload under a confined root.

Modules:
- settings: Centralized configuration
- policy: Extension allow-list and PolicyConfig
- errors: Rejection values (Reason, ErrorKind, Rejected, ListError)
- sanitizer: Strip dangerous characters from paths and filenames
- validator: Character set and length checks (PATH / NAME modes)
- confinement: Canonical resolution under the storage root (StoragePath)
- storage: Filesystem primitives (stat, listdir, exclusive create)
- resolver: Untrusted path -> confined file or directory
- listing: Directory listing with per-entry filtering
- naming: Collision-free upload names
- uploads: Upload flow
- presentation: Size formatting, icons, breadcrumbs
- audit_log: JSON-lines audit trail
- rate_limit: Session rate limiting
- logging_config: Logging setup
"""
