"""Core connector logic.

Module Structure:
    - gitlab/           : python-gitlab services (users, groups, projects, members)
    - connector.py      : GitlabConnector, the operations called by the host
    - transformer.py    : GitLab ↔ connector object transformations
    - membership.py     : membership reconciliation and membership UIDs
    - attributes.py     : attribute extraction and coercion
    - schema.py         : attribute names and object class descriptors
    - objects.py        : object model exchanged with the host
    - exceptions.py     : connector error types

Import explicitly when needed:
    from gitlab_connector.core.connector import GitlabConnector
    from gitlab_connector.core.membership import reconcile
"""
