from hypothesis import given, settings
from hypothesis import strategies as st

from ldap_sync_harness.server.access_control import AccessControlProvisioner
from ldap_sync_harness.server.client import ArtifactoryClient
from ldap_sync_harness.server.document import ConfigDocument
from ldap_sync_harness.server.integration import (
    LdapIntegrationSettings,
    add_integration,
    remove_integration,
)
from tests.fakes import BASE_URL, CONFIG_NS, FakeArtifactory

tag_names = st.from_regex(r"[a-z][A-Za-z0-9]{0,11}", fullmatch=True).filter(
    lambda t: t not in {"ldapSettings", "ldapGroupSettings", "security"}
)
text_values = st.text(
    alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd"), max_codepoint=0x24F)
    | st.sampled_from([" ", "-", "_", ".", "&", "<"]),
    max_size=20,
)
names = st.from_regex(r"[a-z][a-z0-9-]{0,15}", fullmatch=True)


def _xml_escape(value: str) -> str:
    return value.replace("&", "&amp;").replace("<", "&lt;")


@st.composite
def config_documents(draw):
    sections = draw(st.lists(st.tuples(tag_names, text_values), max_size=6))
    security = draw(st.lists(st.tuples(tag_names, text_values), max_size=4))
    body = "".join(f"<{t}>{_xml_escape(v)}</{t}>" for t, v in sections)
    sec = "".join(f"<{t}>{_xml_escape(v)}</{t}>" for t, v in security)
    # stock configurations carry both LDAP containers, empty
    if draw(st.booleans()):
        sec += "<ldapSettings/><ldapGroupSettings/>"
    return ConfigDocument.from_text(f'<config xmlns="{CONFIG_NS}"><security>{sec}</security>{body}</config>')


_SETTINGS = LdapIntegrationSettings(
    ldap_url="ldap://localhost:389",
    base_dn="dc=example,dc=org",
    manager_dn="cn=admin,dc=example,dc=org",
    manager_password="admin",
)


@given(doc=config_documents())
def test_remove_after_add_restores_document(doc):
    assert remove_integration(add_integration(doc, _SETTINGS)).semantically_equal(doc)


@given(doc=config_documents())
def test_remove_on_refetched_document_restores_original(doc):
    added = add_integration(doc, _SETTINGS)
    refetched = ConfigDocument.from_text(added.content)
    assert remove_integration(refetched, created=added.created).semantically_equal(doc)


@given(doc=config_documents())
def test_add_adds_exactly_one_section_each(doc):
    added = add_integration(doc, _SETTINGS)
    assert len(added.findall("security", "ldapSettings", "ldapSetting")) == 1
    assert len(added.findall("security", "ldapGroupSettings", "ldapGroupSetting")) == 1


@given(doc=config_documents())
def test_remove_is_idempotent(doc):
    once = remove_integration(doc)
    assert remove_integration(once).semantically_equal(once)


@settings(max_examples=30)
@given(permission=names, group=names, repo=names, repeats=st.integers(min_value=1, max_value=4))
def test_repeated_grant_converges_to_one_target(permission, group, repo, repeats):
    server = FakeArtifactory()
    server.repositories[repo] = {}
    provisioner = AccessControlProvisioner(
        ArtifactoryClient(BASE_URL, "admin", "password", session=server.session())
    )
    for _ in range(repeats):
        provisioner.grant_deploy_permission(permission, group, repo)

    assert list(server.permissions) == [permission]
    target = server.permissions[permission]
    assert target["repositories"] == [repo]
    assert target["principals"] == {"groups": {group: ["w"]}}
