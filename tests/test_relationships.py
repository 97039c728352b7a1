from unittest import TestCase

from catalog_fixtures import author_book_tables, blog_tables, col, fk, pk, table
from entity_generator.constants import WarningCodes
from entity_generator.domain.models import GenerationContext
from entity_generator.domain.relationships import RelationshipAnalyzer


def analyze(tables):
    context = GenerationContext()
    return RelationshipAnalyzer(context).analyze(tables), context


class TestForwardAndInverse(TestCase):

    def test_author_book(self):
        graph, context = analyze(author_book_tables())

        forward = graph.forward_for("book")
        assert len(forward) == 1
        assert forward[0].name == "fk_author"
        assert forward[0].column == "author_id"
        assert forward[0].referenced_column == "id"

        inverse = graph.inverse_for("author")
        assert len(inverse) == 1
        assert inverse[0].name == "books"
        assert inverse[0].forward_name == "fk_author"
        assert inverse[0].referencing_table == "book"

        assert graph.forward_for("author") == ()
        assert graph.many_to_many == ()
        assert context.warnings == []

    def test_inverse_named_after_referencing_table(self):
        tables = [
            table("customer", [pk()]),
            table("order", [pk(), col("customer_id", "int(11)")], [fk("order", "customer_id", "customer")]),
        ]
        graph, _ = analyze(tables)
        assert [rel.name for rel in graph.inverse_for("customer")] == ["orders"]

    def test_several_foreign_keys_to_one_table(self):
        tables = [
            table("customer", [pk()]),
            table(
                "order",
                [pk(), col("customer_id", "int(11)"), col("billing_customer_id", "int(11)")],
                [fk("order", "customer_id", "customer"), fk("order", "billing_customer_id", "customer")],
            ),
        ]
        graph, _ = analyze(tables)

        forward = graph.forward_for("order")
        assert [rel.name for rel in forward] == ["fk_customer", "fk_customer_billing_customer"]
        assert forward[0].alternate_name == "fk_customer_customer"
        assert forward[1].alternate_name is None

        # Only one inverse per referencing table; the first foreign key wins
        inverse = graph.inverse_for("customer")
        assert len(inverse) == 1
        assert inverse[0].column == "customer_id"
        assert inverse[0].alternate_name == "orders_by_customer"

    def test_self_reference(self):
        tables = [
            table(
                "employee",
                [pk(), col("manager_id", "int(11)", nullable=True)],
                [fk("employee", "manager_id", "employee")],
            ),
        ]
        graph, _ = analyze(tables)

        forward = graph.forward_for("employee")
        assert forward[0].is_self_referential
        assert forward[0].name == "fk_employee"
        assert [rel.name for rel in graph.inverse_for("employee")] == ["employees"]

    def test_unknown_reference_is_skipped_with_warning(self):
        tables = [
            table("book", [pk(), col("publisher_id", "int(11)")], [fk("book", "publisher_id", "publisher")]),
        ]
        graph, context = analyze(tables)

        assert graph.forward_for("book") == ()
        assert graph.inverse == {}
        assert [w.code for w in context.warnings] == [WarningCodes.UNKNOWN_REFERENCE]
        assert context.warnings[0].table == "book"


class TestJunctionTables(TestCase):

    def test_junction_becomes_many_to_many(self):
        graph, _ = analyze(blog_tables())

        assert graph.junction_tables == frozenset({"post_tag"})
        assert len(graph.many_to_many) == 1

        relation = graph.many_to_many[0]
        assert relation.key == ("post", "tag")
        assert relation.junction_table == "post_tag"
        assert relation.name_for("post") == "tags"
        assert relation.name_for("tag") == "posts"
        assert relation.alternate_name_for("post") == "tags_via_post_tag"

    def test_junction_has_no_inverse_relations(self):
        graph, _ = analyze(blog_tables())

        assert graph.inverse_for("post") == ()
        assert graph.inverse_for("tag") == ()
        assert all(rel.from_junction for rel in graph.forward_for("post_tag"))

    def test_second_junction_for_same_pair_is_ignored(self):
        tables = blog_tables() + [
            table(
                "post_tag_link",
                [pk("post_id", auto_increment=False), pk("tag_id", auto_increment=False)],
                [fk("post_tag_link", "post_id", "post"), fk("post_tag_link", "tag_id", "tag")],
            ),
        ]
        graph, _ = analyze(tables)

        assert graph.junction_tables == frozenset({"post_tag", "post_tag_link"})
        assert len(graph.many_to_many) == 1
        assert graph.many_to_many[0].junction_table == "post_tag"
        assert len(graph.many_to_many_for("post")) == 1

    def test_extra_column_is_not_a_junction(self):
        tables = [
            table("post", [pk()]),
            table("tag", [pk()]),
            table(
                "post_tag",
                [pk("post_id", auto_increment=False), pk("tag_id", auto_increment=False), col("weight", "int(11)")],
                [fk("post_tag", "post_id", "post"), fk("post_tag", "tag_id", "tag")],
            ),
        ]
        graph, _ = analyze(tables)

        assert graph.junction_tables == frozenset()
        assert graph.many_to_many == ()
        assert [rel.name for rel in graph.inverse_for("post")] == ["post_tags"]

    def test_self_referencing_association_is_not_a_junction(self):
        tables = [
            table("user", [pk()]),
            table(
                "user_follow",
                [pk("follower_id", auto_increment=False), pk("followee_id", auto_increment=False)],
                [fk("user_follow", "follower_id", "user"), fk("user_follow", "followee_id", "user")],
            ),
        ]
        graph, _ = analyze(tables)

        assert not graph.is_junction("user_follow")
        assert [rel.name for rel in graph.forward_for("user_follow")] == ["fk_user", "fk_user_followee"]
        assert [rel.name for rel in graph.inverse_for("user")] == ["user_follows"]

    def test_junction_needs_both_ends_in_the_run(self):
        tables = [
            table("post", [pk()]),
            table(
                "post_tag",
                [pk("post_id", auto_increment=False), pk("tag_id", auto_increment=False)],
                [fk("post_tag", "post_id", "post"), fk("post_tag", "tag_id", "tag")],
            ),
        ]
        graph, context = analyze(tables)

        assert not graph.is_junction("post_tag")
        assert [w.code for w in context.warnings] == [WarningCodes.UNKNOWN_REFERENCE]
