"""
Multi-step operations on top of the permission layer.

- submissions: submit / resubmit / save and the derived submission status
- evaluations: evaluation upsert keyed by submission
- provisioning: profile creation for new identities and system-side edges
"""
