"""
auth/bypass.py -- Local bypass gate: may this request skip full authentication?

evaluate_local_bypass() is a pure function of one AdminConfig and one
BypassRequest. It applies an ordered, fail-closed rule chain; the first deny
rule that matches decides the outcome:

  1. admin surface disabled            -> deny "local bypass is disabled"
  2. trust_proxy on                    -> deny "trust proxy is enabled"
  3. host allowlist set, host missing  -> deny 'host "<host>" is not allowlisted'
  4. ip allowlist set, ip missing      -> deny 'remote ip "<ip>" is not allowlisted'
  5. otherwise                         -> allow

Security notes:
  Behind a reverse proxy the Host header and the socket peer are rewritten or
  attacker-influenced, so rule 2 turns the feature off regardless of the
  allowlists. An empty allowlist means "no restriction on this dimension";
  core.resolver.bypass_posture_warnings() reports the permissive shapes.

  Matching is exact string comparison on normalized values. No wildcards,
  no CIDR ranges. An empty host or peer address never matches a non-empty
  allowlist.

  The decision reason reveals allowlist structure. Log it; never send it to
  an unauthenticated caller.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

from core.models import AdminConfig, BypassDecision, BypassRequest


def normalize_ip(remote_address: object) -> str:
    if not isinstance(remote_address, str) or not remote_address:
        return ""
    return remote_address.strip().lower()


def normalize_host(host_header: object) -> str:
    """Lower-case the Host header value and strip any port.

    "[::1]:3001" -> "::1", "Example.COM:8080" -> "example.com".
    """
    if not isinstance(host_header, str) or not host_header:
        return ""
    host = host_header.strip().lower()
    if host.startswith("["):
        closing = host.find("]")
        if closing > 1:
            return host[1:closing]
    return host.split(":", 1)[0]


def _allowlisted_host(entry: str) -> str:
    """Normalize one configured host entry.

    A bare IPv6 literal ("::1") is kept whole; only a single trailing ":port"
    or a bracketed literal is reduced the way a Host header is.
    """
    value = entry.strip().lower()
    if value.startswith("[") or value.count(":") == 1:
        return normalize_host(value)
    return value


def _decision(allowed: bool, reason: str, host: str, remote_ip: str) -> BypassDecision:
    return BypassDecision(allowed=allowed, reason=reason, host=host, remote_ip=remote_ip)


def evaluate_local_bypass(request: BypassRequest, config: AdminConfig) -> BypassDecision:
    """Run the rule chain for one request. Never raises; never caches."""
    host = normalize_host(request.host_header)
    remote_ip = normalize_ip(request.remote_address)

    if not config.enabled:
        return _decision(False, "local bypass is disabled", host, remote_ip)

    if config.trust_proxy:
        return _decision(False, "trust proxy is enabled", host, remote_ip)

    # A missing signal never matches a configured allowlist.
    if config.local_allowed_hosts:
        allowed_hosts = {_allowlisted_host(entry) for entry in config.local_allowed_hosts}
        if not host or host not in allowed_hosts:
            return _decision(False, f'host "{host}" is not allowlisted', host, remote_ip)

    if config.local_allowed_ips:
        allowed_ips = {normalize_ip(entry) for entry in config.local_allowed_ips}
        if not remote_ip or remote_ip not in allowed_ips:
            return _decision(False, f'remote ip "{remote_ip}" is not allowlisted', host, remote_ip)

    return _decision(True, "request matched local bypass host/ip allowlists", host, remote_ip)
