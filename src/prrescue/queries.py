ACTIVITY_QUERY = """
query PullRequestActivity($owner: String!, $repo: String!, $first: Int!, $after: String) {
  rateLimit {
    cost
    remaining
    resetAt
  }
  repository(owner: $owner, name: $repo) {
    pullRequests(first: $first, after: $after, states: [OPEN, CLOSED], orderBy: {field: UPDATED_AT, direction: DESC}) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        number
        title
        url
        createdAt
        reviews(first: 30) {
          nodes {
            state
            submittedAt
            author {
              login
            }
          }
        }
        comments(first: 30) {
          nodes {
            createdAt
            author {
              login
            }
          }
        }
        reactions(first: 30) {
          nodes {
            content
            createdAt
            user {
              login
            }
          }
        }
      }
    }
  }
}
"""

OPEN_PR_QUERY = """
query OpenPullRequests($owner: String!, $repo: String!, $first: Int!, $after: String) {
  rateLimit {
    cost
    remaining
    resetAt
  }
  repository(owner: $owner, name: $repo) {
    pullRequests(first: $first, after: $after, states: [OPEN], orderBy: {field: CREATED_AT, direction: DESC}) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        number
        title
        url
        createdAt
        reviews(first: 30) {
          nodes {
            state
            submittedAt
            author {
              login
            }
          }
        }
        comments(first: 30) {
          nodes {
            createdAt
            author {
              login
            }
          }
        }
      }
    }
  }
}
"""

PR_BY_NUMBER_QUERY = """
query PullRequestByNumber($owner: String!, $repo: String!, $number: Int!) {
  rateLimit {
    cost
    remaining
    resetAt
  }
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      number
      title
      url
      createdAt
      reviews(first: 30) {
        nodes {
          state
          submittedAt
          author {
            login
          }
        }
      }
      comments(first: 30) {
        nodes {
          createdAt
          author {
            login
          }
        }
      }
    }
  }
}
"""
