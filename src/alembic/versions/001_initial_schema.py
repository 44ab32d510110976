"""Initial community schema.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

Creates users/sessions, projects with tags, gallery, views, bookmarks,
shares, comments/replies/likes, notifications, activity and skills,
blog CMS tables, vibe checks and project evaluations.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # Accounts
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('username', sa.String(30), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('avatar_url', sa.String(512), nullable=True),
        sa.Column('role', sa.String(), nullable=False, server_default='user'),
        *_timestamps(),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('locked_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_failed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])

    # Projects
    op.create_table(
        'projects',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=False),
        sa.Column('long_description', sa.Text(), nullable=True),
        sa.Column('project_url', sa.String(2048), nullable=False),
        sa.Column('image_url', sa.String(2048), nullable=False),
        sa.Column('vibe_coding_tool', sa.String(50), nullable=True),
        sa.Column('author_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('views_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('shares_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_private', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_projects_author_id', 'projects', ['author_id'])
    op.create_index('ix_projects_featured', 'projects', ['featured'])
    op.create_index('ix_projects_created_at', 'projects', ['created_at'])

    op.create_table(
        'tags',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        'project_tags',
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id'), primary_key=True),
        sa.Column('tag_id', sa.String(), sa.ForeignKey('tags.id'), primary_key=True),
    )
    op.create_index('ix_project_tags_tag_id', 'project_tags', ['tag_id'])

    op.create_table(
        'coding_tools',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('category', sa.String(50), nullable=False, server_default='Other'),
        sa.Column('is_popular', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'project_gallery',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('image_url', sa.String(2048), nullable=False),
        sa.Column('caption', sa.String(255), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_project_gallery_project_id', 'project_gallery', ['project_id'])

    op.create_table(
        'project_views',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('views_count', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('project_id', 'month', 'year'),
    )
    op.create_index('ix_project_views_project_id', 'project_views', ['project_id'])

    op.create_table(
        'bookmarks',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('project_id', 'user_id'),
    )
    op.create_index('ix_bookmarks_project_id', 'bookmarks', ['project_id'])
    op.create_index('ix_bookmarks_user_id', 'bookmarks', ['user_id'])

    op.create_table(
        'shares',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('platform', sa.String(50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_shares_project_id', 'shares', ['project_id'])

    # Interactions
    op.create_table(
        'comments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('author_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_comments_project_id', 'comments', ['project_id'])
    op.create_index('ix_comments_author_id', 'comments', ['author_id'])

    op.create_table(
        'comment_replies',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('comment_id', sa.String(), sa.ForeignKey('comments.id'), nullable=False),
        sa.Column('author_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_comment_replies_comment_id', 'comment_replies', ['comment_id'])
    op.create_index('ix_comment_replies_author_id', 'comment_replies', ['author_id'])

    op.create_table(
        'likes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id'), nullable=True),
        sa.Column('comment_id', sa.String(), sa.ForeignKey('comments.id'), nullable=True),
        sa.Column('reply_id', sa.String(), sa.ForeignKey('comment_replies.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    for column in ('user_id', 'project_id', 'comment_id', 'reply_id'):
        op.create_index(f'ix_likes_{column}', 'likes', [column])

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('actor_id', sa.String(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id'), nullable=True),
        sa.Column('comment_id', sa.String(), sa.ForeignKey('comments.id'), nullable=True),
        sa.Column('reply_id', sa.String(), sa.ForeignKey('comment_replies.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])

    # Profiles
    op.create_table(
        'user_activity',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('target_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_user_activity_user_id', 'user_activity', ['user_id'])

    op.create_table(
        'user_skills',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('category', sa.String(50), nullable=False),
        sa.Column('skill', sa.String(50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('user_id', 'category', 'skill'),
    )
    op.create_index('ix_user_skills_user_id', 'user_skills', ['user_id'])

    # Blog
    op.create_table(
        'blog_categories',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_blog_categories_slug', 'blog_categories', ['slug'], unique=True)

    op.create_table(
        'blog_tags',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('slug', sa.String(50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_blog_tags_slug', 'blog_tags', ['slug'], unique=True)

    op.create_table(
        'blog_posts',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('excerpt', sa.Text(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('tldr', sa.Text(), nullable=True),
        sa.Column('author_id', sa.String(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('category_id', sa.String(), sa.ForeignKey('blog_categories.id'), nullable=True),
        sa.Column('featured_image', sa.String(2048), nullable=True),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_blog_posts_slug', 'blog_posts', ['slug'], unique=True)
    op.create_index('ix_blog_posts_author_id', 'blog_posts', ['author_id'])
    op.create_index('ix_blog_posts_category_id', 'blog_posts', ['category_id'])
    op.create_index('ix_blog_posts_created_at', 'blog_posts', ['created_at'])

    op.create_table(
        'blog_post_tags',
        sa.Column('post_id', sa.String(), sa.ForeignKey('blog_posts.id'), primary_key=True),
        sa.Column('tag_id', sa.String(), sa.ForeignKey('blog_tags.id'), primary_key=True),
    )
    op.create_index('ix_blog_post_tags_tag_id', 'blog_post_tags', ['tag_id'])

    # Vibe checks
    op.create_table(
        'vibe_checks',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('website_url', sa.String(2048), nullable=True),
        sa.Column('project_description', sa.Text(), nullable=False),
        sa.Column('evaluation', postgresql.JSONB(), nullable=True),
        sa.Column('share_id', sa.String(24), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('converted_to_project', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('converted_project_id', sa.String(), sa.ForeignKey('projects.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_vibe_checks_share_id', 'vibe_checks', ['share_id'], unique=True)

    op.create_table(
        'project_evaluations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('fit_score', sa.Integer(), nullable=True),
        sa.Column('value_proposition', sa.Text(), nullable=True),
        sa.Column('evaluation', postgresql.JSONB(), nullable=False, server_default='{}'),
        *_timestamps(),
    )
    op.create_index(
        'ix_project_evaluations_project_id', 'project_evaluations', ['project_id'], unique=True
    )


def downgrade() -> None:
    for table in (
        'project_evaluations',
        'vibe_checks',
        'blog_post_tags',
        'blog_posts',
        'blog_tags',
        'blog_categories',
        'user_skills',
        'user_activity',
        'notifications',
        'likes',
        'comment_replies',
        'comments',
        'shares',
        'bookmarks',
        'project_views',
        'project_gallery',
        'coding_tools',
        'project_tags',
        'tags',
        'projects',
        'sessions',
        'users',
    ):
        op.drop_table(table)
